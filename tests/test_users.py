import logging
import pytest
from fastapi import status
from sqlalchemy import select
from blogapi.core.security import create_access_token, get_optional_current_user, verify_password
from blogapi.models.user import User

@pytest.fixture
def test_user_data():
    """测试用户数据"""
    return {
        "name": "testuser",
        "email": "Test@Example.com",
        "password": "testpassword123"
    }

class TestUserRegistration:
    def test_successful_registration(self, client, test_user_data, session):
        """测试成功注册用户"""
        response = client.post("/api/register", json=test_user_data)
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["user"]["name"] == test_user_data["name"]
        assert data["user"]["email"] == "test@example.com"
        assert "password_hash" not in data["user"]
        assert data["token"]

        user = session.execute(select(User).where(User.email == "test@example.com")).scalar_one()
        assert verify_password(test_user_data["password"], user.password_hash)

    def test_duplicate_email_is_case_insensitive(self, client, test_user_data):
        """测试重复邮箱注册"""
        client.post("/api/register", json=test_user_data)
        test_user_data["email"] = "TEST@example.COM"
        response = client.post("/api/register", json=test_user_data)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Email already in use"

    def test_invalid_email(self, client, test_user_data):
        """测试无效的邮箱格式"""
        test_user_data["email"] = "invalid-email"
        response = client.post("/api/register", json=test_user_data)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["status"] == "error"

class TestUserLogin:
    def test_successful_login(self, client, test_user_data):
        """测试成功登录"""
        client.post("/api/register", json=test_user_data)
        response = client.post("/api/login", json={
            "email": "test@example.com",
            "password": test_user_data["password"]
        })
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["token"]
        assert data["user"]["name"] == test_user_data["name"]

    def test_invalid_credentials(self, client, test_user_data):
        """测试无效的登录凭证"""
        client.post("/api/register", json=test_user_data)
        response = client.post("/api/login", json={
            "email": test_user_data["email"],
            "password": "wrongpassword"
        })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["message"] == "Invalid email or password"

    def test_failed_login_keeps_password_out_of_log(self, client, test_user_data, caplog):
        """失败的登录不应在日志中记录密码"""
        client.post("/api/register", json=test_user_data)
        with caplog.at_level(logging.WARNING, logger="fastapi"):
            response = client.post("/api/login", json={
                "email": test_user_data["email"],
                "password": "wrongPassw0rd!"
            })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Request failed with status 401" in caplog.text
        assert "wrongPassw0rd!" not in caplog.text

    def test_rejected_registration_keeps_password_out_of_log(self, client, test_user_data, caplog):
        test_user_data["password"] = "s3c!"
        with caplog.at_level(logging.WARNING, logger="fastapi"):
            response = client.post("/api/register", json=test_user_data)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "s3c!" not in caplog.text
        assert "s3c!" not in response.text

    def test_logout(self, client):
        response = client.post("/api/logout")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "success"

    def test_logout_names_the_user(self, authenticated_client, caplog):
        with caplog.at_level(logging.INFO, logger="blogapi.api.endpoints.users"):
            response = authenticated_client.post("/api/logout")
        assert response.status_code == status.HTTP_200_OK
        assert f"User {authenticated_client.user['id']} logged out" in caplog.text

    def test_logout_with_invalid_token(self, client):
        response = client.post("/api/logout", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_200_OK

class TestCurrentUser:
    def test_get_current_user(self, authenticated_client):
        """测试获取当前用户"""
        response = authenticated_client.get("/api/user")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "test@example.com"

    def test_unauthorized_access(self, client):
        """测试未授权访问"""
        response = client.get("/api/user")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_token(self, client):
        response = client.get("/api/user", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["message"] == "Invalid or expired token"

class TestOptionalCurrentUser:
    def test_without_token(self, session):
        assert get_optional_current_user(None, session) is None

    def test_with_invalid_token(self, session):
        assert get_optional_current_user("not-a-token", session) is None

    def test_with_valid_token(self, session, make_user):
        user = make_user("alice")
        found = get_optional_current_user(create_access_token(user), session)
        assert found.id == user.id
