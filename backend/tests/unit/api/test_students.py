"""
Unit Tests for the Public Student Endpoints
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.security import create_access_token, decode_token
from portal.modules.auth.registration_settings import ALLOW_REGISTER_KEY, EMAIL_CONFIRMATION_KEY

REGISTER_URL = '/api/v1/students/register'
PASSWORD_URL = '/api/v1/students/request-password-change'


def assert_portal_error(response, status_code: int, code: str):
    assert response.status_code == status_code
    data = response.json()
    assert data['success'] is False
    assert data['error']['code'] == code
    assert isinstance(data['error']['messages'], list)
    assert data['error']['messages']
    return data['error']


class TestStudentRegistration:
    """Test POST /students/register"""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient, student_role, registration_body):
        response = await client.post(REGISTER_URL, json=registration_body)

        assert response.status_code == 201
        data = response.json()
        assert data['user']['email'] == registration_body['email']
        assert data['user']['username'] == registration_body['username']
        assert data['user']['confirmed'] is True
        assert data['user']['role']['type'] == 'student'
        assert 'password' not in data['user']
        assert 'hashed_password' not in data['user']

        payload = decode_token(data['jwt'])
        assert payload['id'] == data['user']['id']

    @pytest.mark.asyncio
    async def test_register_disabled(self, client: AsyncClient, student_role, registration_body,
                                     registration_flag):
        await registration_flag(ALLOW_REGISTER_KEY, False)

        response = await client.post(REGISTER_URL, json=registration_body)

        error = assert_portal_error(response, 403, 'REGISTRATION_DISABLED')
        assert error['message'] == 'Register action is currently disabled'

    @pytest.mark.asyncio
    async def test_register_missing_password(self, client: AsyncClient, student_role, registration_body):
        del registration_body['password']

        response = await client.post(REGISTER_URL, json=registration_body)

        error = assert_portal_error(response, 400, 'INVALID_INPUT')
        assert 'password' in error['details']['fields']

    @pytest.mark.asyncio
    async def test_register_non_institute_email(self, client: AsyncClient, student_role,
                                                make_registration_body):
        response = await client.post(REGISTER_URL, json=make_registration_body(email='student@gmail.com'))

        error = assert_portal_error(response, 400, 'INVALID_EMAIL')
        assert error['message'] == 'Please provide a valid email address'

    @pytest.mark.asyncio
    async def test_register_roll_outside_window(self, client: AsyncClient, student_role,
                                                make_registration_body):
        response = await client.post(REGISTER_URL, json=make_registration_body(username='0001034'))

        error = assert_portal_error(response, 400, 'INVALID_ROLL_NUMBER')
        assert error['message'] == 'Please provide a valid roll number'

    @pytest.mark.asyncio
    async def test_register_hashed_looking_password(self, client: AsyncClient, student_role,
                                                    make_registration_body):
        response = await client.post(
            REGISTER_URL, json=make_registration_body(password='$2b$10$abc$def')
        )

        assert_portal_error(response, 400, 'INVALID_CREDENTIAL_FORMAT')

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, student_role,
                                            make_registration_body):
        first = make_registration_body()
        await client.post(REGISTER_URL, json=first)

        response = await client.post(REGISTER_URL, json=make_registration_body(email=first['email']))

        error = assert_portal_error(response, 409, 'EMAIL_TAKEN')
        assert error['message'] == 'Email is already taken'

    @pytest.mark.asyncio
    async def test_register_duplicate_roll(self, client: AsyncClient, student_role,
                                           make_registration_body):
        first = make_registration_body()
        await client.post(REGISTER_URL, json=first)

        response = await client.post(REGISTER_URL, json=make_registration_body(username=first['username']))

        assert_portal_error(response, 409, 'USERNAME_TAKEN')

    @pytest.mark.asyncio
    async def test_register_without_seeded_role(self, client: AsyncClient, registration_body):
        response = await client.post(REGISTER_URL, json=registration_body)

        assert_portal_error(response, 500, 'CONFIGURATION_ERROR')

    @pytest.mark.asyncio
    async def test_register_with_email_confirmation(self, client: AsyncClient, student_role,
                                                    registration_body, registration_flag, email_sender):
        await registration_flag(EMAIL_CONFIRMATION_KEY, True)

        response = await client.post(REGISTER_URL, json=registration_body)

        assert response.status_code == 201
        data = response.json()
        assert 'jwt' not in data
        assert data['user']['confirmed'] is False
        email_sender.send_confirmation_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_register_confirmation_email_failure(self, client: AsyncClient, student_role,
                                                       registration_body, registration_flag, email_sender):
        await registration_flag(EMAIL_CONFIRMATION_KEY, True)
        email_sender.send_confirmation_email.return_value = False

        response = await client.post(REGISTER_URL, json=registration_body)

        assert_portal_error(response, 500, 'REGISTRATION_FAILED')

    @pytest.mark.asyncio
    async def test_register_as_admin_gets_admin_view(self, client: AsyncClient, student_role,
                                                     registration_body):
        token = create_access_token({'sub': 'admin-id', 'role': 'admin'})

        response = await client.post(
            REGISTER_URL, json=registration_body, headers={'Authorization': f'Bearer {token}'}
        )

        assert response.status_code == 201
        assert response.json()['user']['blocked'] is False

    @pytest.mark.asyncio
    async def test_register_invalid_bearer_is_anonymous(self, client: AsyncClient, student_role,
                                                        registration_body):
        response = await client.post(
            REGISTER_URL, json=registration_body, headers={'Authorization': 'Bearer not-a-token'}
        )

        assert response.status_code == 201
        assert 'blocked' not in response.json()['user']

    @pytest.mark.asyncio
    async def test_register_response_headers(self, client: AsyncClient, student_role, registration_body):
        response = await client.post(REGISTER_URL, json=registration_body)

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['Cache-Control'] == 'no-store'
        assert 'X-Request-ID' in response.headers


    @pytest.mark.asyncio
    @pytest.mark.parametrize('payload', [['x'], 'register me', 42])
    async def test_register_non_object_body(self, client: AsyncClient, student_role, payload):
        response = await client.post(REGISTER_URL, json=payload)

        error = assert_portal_error(response, 400, 'INVALID_INPUT')
        assert error['details']['fields'] == ['body']


class TestPasswordChangeRequest:
    """Test POST /students/request-password-change"""

    @pytest.mark.asyncio
    async def test_request_success(self, client: AsyncClient, db_session: AsyncSession, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institute_email_id': student_record.institute_email_id,
            'roll': student_record.roll,
        })

        assert response.status_code == 200
        assert response.json() == {'message': 'Password change request sent'}

        await db_session.refresh(student_record)
        assert student_record.password_change_requested is True

    @pytest.mark.asyncio
    async def test_request_accepts_camel_case_email(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institutionalEmail': student_record.institute_email_id,
            'roll': student_record.roll,
        })

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_request_accepts_numeric_roll(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institute_email_id': student_record.institute_email_id,
            'roll': int(student_record.roll),
        })

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_request_missing_fields(self, client: AsyncClient):
        response = await client.post(PASSWORD_URL, json={'roll': '2001034'})

        error = assert_portal_error(response, 400, 'INVALID_INPUT')
        assert error['message'] == 'Required roll and email'

    @pytest.mark.asyncio
    async def test_request_no_match(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institute_email_id': student_record.institute_email_id,
            'roll': '0000000',
        })

        error = assert_portal_error(response, 404, 'NOT_FOUND')
        assert error['message'] == "Student not found/Roll and Email don't match"

    @pytest.mark.asyncio
    async def test_request_roll_of_wrong_type(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institute_email_id': student_record.institute_email_id,
            'roll': [student_record.roll],
        })

        error = assert_portal_error(response, 400, 'INVALID_INPUT')
        assert 'roll' in error['details']['fields']

    @pytest.mark.asyncio
    async def test_request_email_of_wrong_type(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json={
            'institutionalEmail': 123,
            'roll': student_record.roll,
        })

        error = assert_portal_error(response, 400, 'INVALID_INPUT')
        assert 'detail' not in response.json()
        assert error['details']['fields']

    @pytest.mark.asyncio
    async def test_request_non_object_body(self, client: AsyncClient, student_record):
        response = await client.post(PASSWORD_URL, json=['x'])

        assert_portal_error(response, 400, 'INVALID_INPUT')
