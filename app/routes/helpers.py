from flask import request


def request_payload():
    """JSON body if there is one, otherwise the submitted form fields"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def pagination_args(default_item_per_page):
    page = request.args.get('page', 1, type=int) or 1
    item_per_page = request.args.get('itemPerPage', default_item_per_page, type=int) or default_item_per_page
    return page, item_per_page
