"""
Response messages returned by the API
"""

UNKNOWN_ERROR = 'Unknown server error occurred.'
SLUG_GENERATE_ERROR = 'Error creating slug.'
FILE_NAME_GENERATE_ERROR = 'Error creating file name.'
INVALID_PARAMETERS = 'Missing required parameters: '
INVALID_EMAIL = 'The email address is invalid.'
INVALID_USERNAME_CHARACTERS = 'The username contains invalid characters. [a-zA-Z0-9]'
INVALID_USERNAME_LENGTH = 'The username must be at least 6 characters and a maximum of 16 characters.'
INVALID_PASSWORD_LENGTH = 'The password must be at least 8 characters and a maximum of 32 characters.'
INVALID_SHIPPING_METHOD = "The delivery method must be either 'shipping' or 'pickup'."
INVALID_ORDER_STATUS = 'Invalid order status.'
INVALID_USERNAME_OR_PASSWORD = 'The username or password is incorrect.'
INVALID_IMAGE_FILE_TYPE = 'The file format is not an image.'
INVALID_REQUEST = 'Invalid request.'
EXPIRED_REQUEST = 'This request has expired.'
INVALID_TOKEN = 'Invalid token.'
FILE_EXCEED_LIMIT = 'The number of files or file size exceeds the limit.'
RATE_LIMITED = 'Please try again later.'
NOT_FOUND = 'Resource not found.'

VERIFY_SESSION_SUCCESS = 'Token verified successfully.'
AUTHORIZE_SUCCESS = 'Logged in successfully.'
DEAUTHORIZE_SUCCESS = 'Logged out successfully.'
GET_DATA_SUCCESS = 'Data retrieved successfully.'

CATEGORY_NOT_FOUND = 'Category not found.'
CREATE_CATEGORY_SUCCESS = 'Category created successfully.'
CREATE_CATEGORY_ERROR = 'Failed to create the category.'
UPDATE_CATEGORY_SUCCESS = 'Category updated successfully.'
DELETE_CATEGORY_SUCCESS = 'Category deleted successfully.'
DELETE_CATEGORY_ERROR = 'Failed to delete the category.'
UPLOAD_IMAGE_SUCCESS = 'Image uploaded successfully.'

SUBSCRIBE_NEWSLETTER_EMAIL_SUBJECT = 'Subscribe Newsletter Confirmation'
SUBSCRIBE_NEWSLETTER_EMAIL_LINK_TEXT = 'Click on this link to confirm your subscription request.'
SUBSCRIBE_NEWSLETTER_SUCCESS = 'Check your email to confirm your request.'
SUBSCRIBE_NEWSLETTER_CONFIRMATION_ERROR = 'Error occurred while confirming the request.'
SUBSCRIBE_NEWSLETTER_CONFIRMATION_SUCCESS = 'Successfully subscribed to the newsletter.'

ORDER_NOT_FOUND = 'Order not found.'
ORDER_NEED_UPDATE = 'Order information needs to be updated.'
ORDER_INFO_CHANGED = 'Order information changed.'
CREATE_ORDER_ERROR = 'Failed to create the order.'
CREATE_ORDER_SUCCESS = 'Order created successfully.'
UPDATE_ORDER_ERROR = 'Failed to update the order.'
UPDATE_ORDER_SUCCESS = 'Order updated successfully.'
DELETE_ORDER_ERROR = 'Failed to delete the order.'
DELETE_ORDER_SUCCESS = 'Order deleted successfully.'
UNEXPECTED_ORDER_STATUS_WHILE_RESTORE_QUANTITY = 'The order status must be: Refunded or Canceled.'
ORDER_QUANTITY_ALREADY_RESTORED = 'Order product quantity has already been restored.'
RESTORE_ORDER_PRODUCT_QUANTITY_ERROR = 'Failed to restore product quantity.'
RESTORE_ORDER_PRODUCT_QUANTITY_SUCCESS = 'Order product quantity restored successfully.'

PRODUCT_NOT_FOUND = 'Product not found.'
PRODUCT_INVALID_CATEGORY = 'Invalid product categories.'
CREATE_PRODUCT_ERROR = 'Failed to create the product.'
CREATE_PRODUCT_SUCCESS = 'Product created successfully.'
UPDATE_PRODUCT_ERROR = 'Failed to update the product.'
UPDATE_PRODUCT_SUCCESS = 'Product updated successfully.'
DELETE_PRODUCT_ERROR = 'Failed to delete the product.'
DELETE_PRODUCT_SUCCESS = 'Product deleted successfully.'

INVALID_REGISTER_INFORMATION = 'Invalid register information.'
REGISTER_SUCCESS = 'Registered successfully.'
EMAIL_ALREADY_EXIST = 'This email address is already exist.'
USERNAME_ALREADY_EXIST = 'This username is already exist.'

USER_NOT_FOUND = 'User not found.'
UPDATE_EMAIL_ADDRESS_EMAIL_SUBJECT = 'Update Email Address'
UPDATE_EMAIL_ADDRESS_EMAIL_LINK_TEXT = 'Click on this link to update your email address.'
UPDATE_USER_INFO_SUCCESS = 'User info updated successfully.'
UPDATE_EMAIL_TOKEN_MISSING = 'No update email token has been provided.'
UPDATE_EMAIL_SUCCESS = 'Email address updated successfully.'
UPDATE_PASSWORD_NEW_MATCH_OLD = 'New password matches old password.'
UPDATE_PASSWORD_INCORRECT_OLD_PASSWORD = 'The current password is incorrect.'
UPDATE_PASSWORD_SUCCESS = 'Password updated successfully.'
DELETE_USER_INCORRECT_PASSWORD = 'The password is incorrect.'
DELETE_USER_SUCCESS = 'User deleted successfully.'
UPDATE_USER_AS_ADMIN_ERROR = 'Failed to update the user.'
UPDATE_USER_AS_ADMIN_SUCCESS = 'User updated successfully.'

FORGOT_PASSWORD_SUCCESS = 'Check your email to reset your password.'
FORGOT_PASSWORD_EMAIL_SUBJECT = 'Forgot Your Password?'
FORGOT_PASSWORD_EMAIL_LINK_TEXT = 'Click this link to recover your account.'
RESET_PASSWORD_TOKEN_MISSING = 'No recovery token has been provided.'
RESET_PASSWORD_NEW_PASSWORD_MISSING = 'No new password has been provided.'
RESET_PASSWORD_SUCCESS = 'Password updated successfully.'


def missing_parameters(*names):
    """Build the "Missing required parameters" message for the given field names"""
    return INVALID_PARAMETERS + ', '.join(f"'{name}'" for name in names)
