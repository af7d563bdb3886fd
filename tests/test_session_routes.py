"""Login, current-user lookup, logout, and password change over HTTP."""

import unittest

from accounts_testkit import USER_API, AccountApiTestCase
from app.models import User


class TestLogin(AccountApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.insert_user("ann", password="right-pw", email="ann@mail.com")

    def test_login_by_username_sets_http_only_cookie(self) -> None:
        response = self.login("ann", "right-pw")
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["id"], self.user_id)
        set_cookie = response.headers["set-cookie"]
        self.assertTrue(set_cookie.startswith("token="))
        self.assertIn("HttpOnly", set_cookie)

    def test_login_by_email(self) -> None:
        self.assertEqual(self.login("ann@mail.com", "right-pw").status_code, 201)

    def test_login_by_email_ignores_case(self) -> None:
        self.assertEqual(self.login("ANN@Mail.com", "right-pw").status_code, 201)

    def test_email_login_reaches_email_owner(self) -> None:
        # A username shaped like ann's email, written directly to the table.
        self.insert_user("ann@mail.com", password="other-pw", email="mallory@mail.com")
        response = self.login("ann@mail.com", "right-pw")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["id"], self.user_id)
        self.assertEqual(self.login("ann@mail.com", "other-pw").status_code, 400)

    def test_suffix_past_72_bytes_is_rejected(self) -> None:
        self.insert_user("bob", password="a" * 72)
        self.assertEqual(self.login("bob", "a" * 72).status_code, 201)
        self.client.cookies.clear()
        response = self.login("bob", "a" * 72 + "WRONG")
        self.assertEqual(response.status_code, 400)
        self.assertNotIn("set-cookie", response.headers)

    def test_unknown_account(self) -> None:
        response = self.login("nobody", "right-pw")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "User doesn't exist!")

    def test_wrong_password_never_succeeds(self) -> None:
        for attempt in [" right-pw", "right-pw ", "RIGHT-PW", "right-p", "right-pw\x00", "wrong"]:
            response = self.login("ann", attempt)
            self.assertEqual(response.status_code, 400, attempt)
            self.assertNotIn("set-cookie", response.headers)

    def test_missing_fields(self) -> None:
        response = self.client.post(f"{USER_API}/login-user", json={"usernameOrEmail": "ann"})
        self.assertEqual(response.status_code, 400)

    def test_no_response_contains_password_hash(self) -> None:
        response = self.login("ann", "right-pw")
        text = response.text
        self.assertNotIn("right-pw", text)
        self.assertNotIn("password", text.lower())
        self.assertNotIn("$2b$", text)


class TestCurrentUser(AccountApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.insert_user("ann")

    def test_requires_session(self) -> None:
        response = self.client.get(f"{USER_API}/getuser")
        self.assertEqual(response.status_code, 401)

    def test_returns_caller_with_cookie(self) -> None:
        self.login_as("ann")
        response = self.client.get(f"{USER_API}/getuser")
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["username"], "ann")
        self.assertIn("phoneNumber", user)
        self.assertIn("createdAt", user)
        self.assertNotIn("passwordHash", user)

    def test_accepts_bearer_header(self) -> None:
        token = self.login("ann", "secret-pw").json()["token"]
        self.client.cookies.clear()
        response = self.client.get(
            f"{USER_API}/getuser", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 200)

    def test_invalid_cookie(self) -> None:
        response = self.client.get(f"{USER_API}/getuser", headers={"Cookie": "token=not-a-jwt"})
        self.assertEqual(response.status_code, 401)

    def test_stale_cookie_falls_back_to_bearer_header(self) -> None:
        token = self.login("ann", "secret-pw").json()["token"]
        self.client.cookies.clear()
        response = self.client.get(
            f"{USER_API}/getuser",
            headers={"Cookie": "token=not-a-jwt", "Authorization": f"Bearer {token}"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["username"], "ann")

    def test_stale_cookie_and_bad_bearer(self) -> None:
        response = self.client.get(
            f"{USER_API}/getuser",
            headers={"Cookie": "token=not-a-jwt", "Authorization": "Bearer also-not-a-jwt"},
        )
        self.assertEqual(response.status_code, 401)

    def test_session_for_deleted_account(self) -> None:
        self.login_as("ann")
        with self.SessionLocal() as db:
            db.query(User).filter(User.id == self.user_id).delete()
            db.commit()
        self.assertEqual(self.client.get(f"{USER_API}/getuser").status_code, 401)


class TestLogout(AccountApiTestCase):
    def test_logout_expires_cookie(self) -> None:
        self.insert_user("ann")
        self.login_as("ann")
        response = self.client.get(f"{USER_API}/logout")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"], "Log out successful!")
        set_cookie = response.headers["set-cookie"]
        self.assertTrue(set_cookie.startswith('token="";') or set_cookie.startswith("token=;"))
        self.assertIn("Max-Age=0", set_cookie)
        self.assertIn("HttpOnly", set_cookie)
        self.assertEqual(self.client.get(f"{USER_API}/getuser").status_code, 401)


class TestChangePassword(AccountApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.insert_user("ann", password="old-pw")
        self.login_as("ann", "old-pw")

    def _change(self, old: str, new: str, confirm: str):
        return self.client.put(
            f"{USER_API}/update-user-password",
            json={"oldPassword": old, "newPassword": new, "confirmPassword": confirm},
        )

    def test_old_password_stops_working(self) -> None:
        response = self._change("old-pw", "new-pw", "new-pw")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Password updated successfully!")
        self.client.cookies.clear()
        self.assertEqual(self.login("ann", "old-pw").status_code, 400)
        self.assertEqual(self.login("ann", "new-pw").status_code, 201)

    def test_wrong_old_password(self) -> None:
        response = self._change("nope", "new-pw", "new-pw")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Old password is incorrect!")

    def test_confirmation_mismatch(self) -> None:
        response = self._change("old-pw", "new-pw", "new-pw2")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Passwords don't match!")
        self.client.cookies.clear()
        self.assertEqual(self.login("ann", "old-pw").status_code, 201)

    def test_over_long_new_password_is_refused(self) -> None:
        response = self._change("old-pw", "é" * 37, "é" * 37)
        self.assertEqual(response.status_code, 400)
        self.client.cookies.clear()
        self.assertEqual(self.login("ann", "old-pw").status_code, 201)

    def test_requires_session(self) -> None:
        self.client.cookies.clear()
        self.assertEqual(self._change("old-pw", "a", "a").status_code, 401)


if __name__ == "__main__":
    unittest.main()
