"""PATCH /users/me/password: forced and normal rotation."""

import unittest

from support import ApiTestCase


class TestForcedRotation(ApiTestCase):
    """A flagged account rotates without the current password."""

    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.create_user("admin", "password", role="SUPER_ADMIN", must_change_password=True)
        self.client = self.logged_in_client("admin", "password")

    def change(self, **body: str):
        return self.client.patch(f"{self.prefix}/users/me/password", json=body)

    def test_forced_rotation_without_current_password(self) -> None:
        resp = self.change(newPassword="n3w-Secret")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"message": "Password changed successfully"})
        self.assertFalse(self.get_user(self.user_id).must_change_password)

        me = self.client.get(f"{self.prefix}/auth/me").json()
        self.assertFalse(me["mustChangePassword"])

        fresh = self.new_client()
        self.assertEqual(self.login("admin", "password", client=fresh).status_code, 401)
        login = self.login("admin", "n3w-Secret", client=fresh)
        self.assertEqual(login.status_code, 200)
        self.assertFalse(login.json()["mustChangePassword"])

    def test_forced_rotation_ignores_supplied_current_password(self) -> None:
        resp = self.change(currentPassword="not-the-password", newPassword="n3w-Secret")
        self.assertEqual(resp.status_code, 200)

    def test_rotation_is_audited(self) -> None:
        self.change(newPassword="n3w-Secret")
        entries = self.audit_entries("UPDATE")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].performed_by, "admin")

    def test_same_password_rejected(self) -> None:
        resp = self.change(newPassword="password")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(), {"error": "New password must be different from the current password"}
        )
        self.assertTrue(self.get_user(self.user_id).must_change_password)

    def test_short_password_rejected(self) -> None:
        resp = self.change(newPassword="abc")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Password must be at least 6 characters"})
        self.assertTrue(self.get_user(self.user_id).must_change_password)

    def test_requires_session(self) -> None:
        resp = self.new_client().patch(
            f"{self.prefix}/users/me/password", json={"newPassword": "n3w-Secret"}
        )
        self.assertEqual(resp.status_code, 401)


class TestNormalRotation(ApiTestCase):
    """An unflagged account must prove the current password."""

    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.create_user("editor", "old-secret")
        self.client = self.logged_in_client("editor", "old-secret")

    def change(self, **body: str):
        return self.client.patch(f"{self.prefix}/users/me/password", json=body)

    def test_missing_current_password(self) -> None:
        resp = self.change(newPassword="new-secret")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Current password is required"})

    def test_wrong_current_password(self) -> None:
        resp = self.change(currentPassword="guess", newPassword="new-secret")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Current password is incorrect"})

    def test_successful_rotation(self) -> None:
        resp = self.change(currentPassword="old-secret", newPassword="new-secret")
        self.assertEqual(resp.status_code, 200)
        fresh = self.new_client()
        self.assertEqual(self.login("editor", "new-secret", client=fresh).status_code, 200)

    def test_password_longer_than_bcrypt_input_rejected(self) -> None:
        resp = self.change(currentPassword="old-secret", newPassword="x" * 73)
        self.assertEqual(resp.status_code, 422)
        fresh = self.new_client()
        self.assertEqual(self.login("editor", "old-secret", client=fresh).status_code, 200)

    def test_missing_new_password_is_invalid_request(self) -> None:
        resp = self.change(currentPassword="old-secret")
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()
