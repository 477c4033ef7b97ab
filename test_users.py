#!/usr/bin/env python3
"""
Self-service account changes and admin user management
"""
import io
from pathlib import Path
from unittest.mock import patch

import pytest

from app.models import User
from app.services import account_service, messages
from conftest import (
    ADMIN_PASSWORD, ADMIN_USERNAME, MEMBER_PASSWORD, MEMBER_USERNAME, _add_user, login
)

MEMBER_URL = f'/user/{MEMBER_USERNAME}'


def avatar_file(name='me.png', mimetype='image/png'):
    return (io.BytesIO(b'\x89PNG fake'), name, mimetype)


def mailed_token(send_mail):
    send_mail.assert_called_once()
    link = send_mail.call_args[0][3]
    return link.split('token=', 1)[1]


def member():
    return User.query.filter_by(username=MEMBER_USERNAME).one()


# ---------------------------------------------------------------------------
# Own account
# ---------------------------------------------------------------------------

def test_get_own_info(member_client):
    response = member_client.get(MEMBER_URL)

    assert response.status_code == 200
    assert response.get_json()['data'] == {
        'username': MEMBER_USERNAME,
        'email': f'{MEMBER_USERNAME}@example.com',
        'role': 'member',
        'avatarFileName': None,
        'createdAt': member().created_at.isoformat(),
    }


def test_other_accounts_are_forbidden(member_client):
    response = member_client.get(f'/user/{ADMIN_USERNAME}')

    assert response.status_code == 403
    assert response.get_json()['message'] == messages.INVALID_TOKEN


def test_own_account_routes_require_login(client):
    assert client.get(MEMBER_URL).status_code == 401
    assert client.post(f'{MEMBER_URL}/update-password', json={}).status_code == 401


def test_update_info_mails_email_change_link(member_client):
    with patch('app.services.account_service.send_link_mail') as send_mail:
        response = member_client.patch(MEMBER_URL, json={'email': 'New.Address@Example.com'})

    assert response.status_code == 200
    assert response.get_json()['message'] == messages.UPDATE_USER_INFO_SUCCESS
    email, subject, _, link = send_mail.call_args[0]
    assert email == 'new.address@example.com'
    assert subject == messages.UPDATE_EMAIL_ADDRESS_EMAIL_SUBJECT
    assert link.startswith('http://localhost:3000/update-email?token=')
    assert member().email == f'{MEMBER_USERNAME}@example.com'


def test_update_info_without_changes(member_client):
    with patch('app.services.account_service.send_link_mail') as send_mail:
        response = member_client.patch(MEMBER_URL, json={})

    assert response.status_code == 200
    send_mail.assert_not_called()


@pytest.mark.parametrize('email, message', [
    ('not-an-email', messages.INVALID_EMAIL),
    (f'{ADMIN_USERNAME}@example.com', messages.EMAIL_ALREADY_EXIST),
    (['a@example.com'], messages.missing_parameters('email')),
])
def test_update_info_rejects_email(member_client, email, message):
    _add_user(ADMIN_USERNAME, ADMIN_PASSWORD, 'admin')

    with patch('app.services.account_service.send_link_mail') as send_mail:
        response = member_client.patch(MEMBER_URL, json={'email': email})

    assert response.status_code == 400
    assert response.get_json()['message'] == message
    send_mail.assert_not_called()


def test_update_info_is_limited_per_user(app, member_client):
    app.config['RATELIMIT_ENABLED'] = True

    with patch('app.services.account_service.send_link_mail'):
        statuses = [member_client.patch(MEMBER_URL, json={}).status_code for _ in range(11)]

    assert statuses == [200] * 10 + [429]


def test_email_change_link_updates_address(member_client):
    with patch('app.services.account_service.send_link_mail') as send_mail:
        member_client.patch(MEMBER_URL, json={'email': 'new.address@example.com'})
    token = mailed_token(send_mail)

    response = member_client.post('/user/update-email-address', json={'token': token})

    assert response.status_code == 200
    assert response.get_json()['message'] == messages.UPDATE_EMAIL_SUCCESS
    assert member().email == 'new.address@example.com'

    again = member_client.post('/user/update-email-address', json={'token': token})
    assert again.status_code == 401
    assert again.get_json()['message'] == messages.INVALID_TOKEN


def test_email_change_link_dies_with_password_change(member_client):
    with patch('app.services.account_service.send_link_mail') as send_mail:
        member_client.patch(MEMBER_URL, json={'email': 'new.address@example.com'})
    token = mailed_token(send_mail)
    member_client.post(f'{MEMBER_URL}/update-password',
                       json={'currentPassword': MEMBER_PASSWORD, 'newPassword': 'Changed123'})

    response = member_client.post('/user/update-email-address', json={'token': token})

    assert response.status_code == 401
    assert member().email == f'{MEMBER_USERNAME}@example.com'


def test_email_change_link_errors(app, client):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')
    missing = client.post('/user/update-email-address', json={})
    tampered = client.post('/user/update-email-address', json={'token': 'abc.def'})

    app.config['ACCOUNT_TOKEN_MAX_AGE'] = -1
    user = member()
    token = account_service.make_account_token(
        account_service.EMAIL_UPDATE_SALT, user.username,
        account_service.account_fingerprint(user.password_hash, user.email),
        newEmail='late@example.com')
    expired = client.post('/user/update-email-address', json={'token': token})

    assert missing.status_code == 400
    assert missing.get_json()['message'] == messages.UPDATE_EMAIL_TOKEN_MISSING
    assert tampered.status_code == 401
    assert tampered.get_json()['message'] == messages.INVALID_TOKEN
    assert expired.status_code == 401
    assert expired.get_json()['message'] == messages.EXPIRED_REQUEST


def test_update_password(member_client):
    response = member_client.post(f'{MEMBER_URL}/update-password',
                                  json={'currentPassword': MEMBER_PASSWORD, 'newPassword': 'Changed123'})

    assert response.status_code == 200
    assert response.get_json()['message'] == messages.UPDATE_PASSWORD_SUCCESS
    assert member().check_password('Changed123')
    assert login(member_client, MEMBER_USERNAME, 'Changed123').status_code == 200


@pytest.mark.parametrize('payload, message', [
    ({'currentPassword': MEMBER_PASSWORD},
     messages.missing_parameters('username', 'currentPassword', 'newPassword')),
    ({'currentPassword': MEMBER_PASSWORD, 'newPassword': MEMBER_PASSWORD},
     messages.UPDATE_PASSWORD_NEW_MATCH_OLD),
    ({'currentPassword': MEMBER_PASSWORD, 'newPassword': 'short'}, messages.INVALID_PASSWORD_LENGTH),
    ({'currentPassword': 'WrongPass1', 'newPassword': 'Changed123'},
     messages.UPDATE_PASSWORD_INCORRECT_OLD_PASSWORD),
])
def test_update_password_errors(member_client, payload, message):
    response = member_client.post(f'{MEMBER_URL}/update-password', json=payload)

    assert response.status_code == 400
    assert response.get_json()['message'] == message
    assert member().check_password(MEMBER_PASSWORD)


def test_delete_own_account(member_client, app):
    member_client.post(f'{MEMBER_URL}/upload-avatar', data={'avatarImage': avatar_file()},
                       content_type='multipart/form-data')
    avatar_path = Path(app.config['UPLOAD_FOLDER']) / 'avatar' / 'me.png'
    assert avatar_path.exists()

    response = member_client.post(f'{MEMBER_URL}/delete-user', json={'currentPassword': MEMBER_PASSWORD})

    assert response.status_code == 200
    assert response.get_json()['message'] == messages.DELETE_USER_SUCCESS
    assert User.query.filter_by(username=MEMBER_USERNAME).count() == 0
    assert not avatar_path.exists()
    assert member_client.get('/user').status_code == 401


def test_delete_own_account_with_wrong_password(member_client):
    response = member_client.post(f'{MEMBER_URL}/delete-user', json={'currentPassword': 'WrongPass1'})

    assert response.status_code == 400
    assert response.get_json()['message'] == messages.DELETE_USER_INCORRECT_PASSWORD
    assert User.query.filter_by(username=MEMBER_USERNAME).count() == 1


def test_upload_avatar_replaces_previous(member_client, app):
    first = member_client.post(f'{MEMBER_URL}/upload-avatar', data={'avatarImage': avatar_file('a.png')},
                               content_type='multipart/form-data')
    second = member_client.post(f'{MEMBER_URL}/upload-avatar', data={'avatarImage': avatar_file('b.png')},
                                content_type='multipart/form-data')

    assert first.status_code == second.status_code == 201
    assert second.get_json()['data'] == {'avatarFileName': 'b.png'}
    avatar_dir = Path(app.config['UPLOAD_FOLDER']) / 'avatar'
    assert not (avatar_dir / 'a.png').exists()
    assert (avatar_dir / 'b.png').exists()
    assert member().avatar_file_name == 'b.png'


def test_upload_avatar_rejects_non_images(member_client):
    response = member_client.post(f'{MEMBER_URL}/upload-avatar',
                                  data={'avatarImage': avatar_file('notes.txt', 'text/plain')},
                                  content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json()['message'] == messages.INVALID_IMAGE_FILE_TYPE


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------

def test_admin_lists_users(admin_client):
    for index in range(3):
        _add_user(f'member{index}a', MEMBER_PASSWORD, 'member')

    response = admin_client.get('/user/admin-get-users?page=2&itemPerPage=2')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert [user['username'] for user in data['users']] == ['member1a', 'member2a']
    assert set(data['users'][0]) == {'username', 'email', 'role', 'avatarFileName', 'createdAt'}
    assert data['meta']['totalItems'] == 4
    assert data['meta']['prevPage'] == '/user/admin-get-users?page=1&itemPerPage=2'


def test_admin_creates_user_with_avatar(admin_client, app):
    response = admin_client.post('/user/admin-create', data={
        'email': 'Staff@Example.com', 'username': 'StaffUser', 'password': 'StaffPass1',
        'role': 'admin', 'avatarImage': avatar_file(),
    }, content_type='multipart/form-data')

    assert response.status_code == 201
    assert response.get_json()['message'] == messages.REGISTER_SUCCESS
    user = User.query.filter_by(username='staffuser').one()
    assert user.email == 'staff@example.com'
    assert user.role == 'admin'
    assert user.check_password('StaffPass1')
    assert (Path(app.config['UPLOAD_FOLDER']) / 'avatar' / user.avatar_file_name).exists()


@pytest.mark.parametrize('fields, message', [
    ({'role': ''}, messages.missing_parameters('email', 'username', 'password', 'role')),
    ({'role': 'owner'}, messages.INVALID_REGISTER_INFORMATION),
    ({'username': 'bad name'}, messages.INVALID_REGISTER_INFORMATION),
    ({'username': ADMIN_USERNAME}, messages.USERNAME_ALREADY_EXIST),
    ({'email': f'{ADMIN_USERNAME}@example.com'}, messages.EMAIL_ALREADY_EXIST),
])
def test_admin_create_errors(admin_client, fields, message):
    payload = dict({'email': 'staff@example.com', 'username': 'staffuser',
                    'password': 'StaffPass1', 'role': 'member'}, **fields)

    response = admin_client.post('/user/admin-create', json=payload)

    assert response.status_code == 400
    assert response.get_json()['message'] == message
    assert User.query.count() == 1


def test_admin_updates_user(admin_client):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')

    response = admin_client.patch('/user/admin-update', json={
        'targetUsername': MEMBER_USERNAME, 'username': 'Renamed01', 'email': 'renamed@example.com',
        'password': 'Renamed123', 'role': 'admin',
    })

    assert response.status_code == 200
    assert response.get_json()['message'] == messages.UPDATE_USER_AS_ADMIN_SUCCESS
    user = User.query.filter_by(username='renamed01').one()
    assert user.email == 'renamed@example.com'
    assert user.role == 'admin'
    assert user.check_password('Renamed123')


@pytest.mark.parametrize('fields, message', [
    ({'targetUsername': 'ghostuser'}, f'{messages.USER_NOT_FOUND} (ghostuser)'),
    ({'email': 'nope'}, messages.UPDATE_USER_AS_ADMIN_ERROR),
    ({'password': 'short'}, messages.UPDATE_USER_AS_ADMIN_ERROR),
    ({'role': 'owner'}, messages.UPDATE_USER_AS_ADMIN_ERROR),
    ({'username': ADMIN_USERNAME}, messages.USERNAME_ALREADY_EXIST),
    ({'email': f'{ADMIN_USERNAME}@example.com'}, messages.EMAIL_ALREADY_EXIST),
])
def test_admin_update_errors(admin_client, fields, message):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')

    response = admin_client.patch('/user/admin-update',
                                  json=dict({'targetUsername': MEMBER_USERNAME}, **fields))

    assert response.status_code == 400
    assert response.get_json()['message'] == message
    user = member()
    assert user.email == f'{MEMBER_USERNAME}@example.com'
    assert user.role == 'member'
    assert user.check_password(MEMBER_PASSWORD)


def test_admin_deletes_user(admin_client):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')

    response = admin_client.delete('/user/admin-delete', json={'username': MEMBER_USERNAME.upper()})
    missing = admin_client.delete('/user/admin-delete', json={'username': MEMBER_USERNAME})

    assert response.status_code == 200
    assert User.query.filter_by(username=MEMBER_USERNAME).count() == 0
    assert missing.status_code == 400
    assert missing.get_json()['message'] == f'{messages.USER_NOT_FOUND} ({MEMBER_USERNAME})'


def test_admin_uploads_avatar(admin_client):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')

    response = admin_client.post('/user/admin-upload-avatar',
                                 data={'username': MEMBER_USERNAME, 'avatarImage': avatar_file()},
                                 content_type='multipart/form-data')

    assert response.status_code == 201
    assert member().avatar_file_name == 'me.png'


@pytest.mark.parametrize('method, path', [
    ('get', '/user/admin-get-users'),
    ('post', '/user/admin-create'),
    ('patch', '/user/admin-update'),
    ('delete', '/user/admin-delete'),
    ('post', '/user/admin-upload-avatar'),
])
def test_admin_user_routes_reject_members(member_client, method, path):
    response = getattr(member_client, method)(path, json={})

    assert response.status_code == 403
