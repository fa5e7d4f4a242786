"""API tests for /v1/downloads: blueprint CRUD, command ordering and replacement."""

import unittest

from sqlalchemy import select

from app.models import DownloadCommand
from helpers import ApiTestCase


def _blueprint(**overrides: object) -> dict:
    body = {
        "displayName": "Firefox",
        "packageId": "Mozilla.Firefox",
        "description": "Web browser",
        "provider": "winget",
        "installType": "single",
        "commands": ["winget install Mozilla.Firefox"],
    }
    body.update(overrides)
    return body


class DownloadsTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.admin_headers()
        self.user = self.user_headers()

    def create(self, **overrides: object) -> dict:
        resp = self.client.post("/v1/downloads", json=_blueprint(**overrides), headers=self.admin)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["download"]


class TestCreateAndRead(DownloadsTestCase):
    def test_round_trip_command_order(self) -> None:
        created = self.create(commands=["a", "b"])
        self.assertEqual([c["sortOrder"] for c in created["commands"]], [0, 1])

        resp = self.client.get(f"/v1/downloads/{created['id']}", headers=self.user)
        self.assertEqual(resp.status_code, 200)
        commands = resp.json()["download"]["commands"]
        self.assertEqual([c["command"] for c in commands], ["a", "b"])
        self.assertEqual([c["sortOrder"] for c in commands], [0, 1])

    def test_defaults_and_owner(self) -> None:
        body = _blueprint()
        del body["installType"]
        resp = self.client.post("/v1/downloads", json=body, headers=self.admin)
        download = resp.json()["download"]
        self.assertEqual(download["installType"], "single")
        self.assertFalse(download["isInteractive"])
        me = self.client.get("/v1/users/me", headers=self.admin).json()["user"]
        self.assertEqual(download["createdById"], me["id"])

    def test_custom_script_scenario(self) -> None:
        script = "Write-Host 'hello'\nStart-Process setup.exe -Wait"
        created = self.create(
            provider="custom",
            installType="single",
            packageId=None,
            scriptPath="scripts/setup.ps1",
            scriptContent=script,
            isInteractive=True,
            commands=[script],
        )
        download = self.client.get(
            f"/v1/downloads/{created['id']}", headers=self.user
        ).json()["download"]
        self.assertTrue(download["isInteractive"])
        self.assertEqual(download["scriptContent"], script)
        self.assertEqual([c["command"] for c in download["commands"]], [script])

    def test_non_admin_cannot_create(self) -> None:
        resp = self.client.post("/v1/downloads", json=_blueprint(), headers=self.user)
        self.assertEqual(resp.status_code, 403)

    def test_validation(self) -> None:
        cases = {
            "displayName": _blueprint(displayName=""),
            "provider": _blueprint(provider="apt"),
            "installType": _blueprint(installType="both"),
            "commands": _blueprint(commands=[]),
            "icon": _blueprint(icon="x" * 500_001),
            "scriptPath": _blueprint(scriptPath="p" * 501),
        }
        for field, body in cases.items():
            with self.subTest(field=field):
                resp = self.client.post("/v1/downloads", json=body, headers=self.admin)
                self.assertEqual(resp.status_code, 400)
                self.assertIn(field, resp.json()["details"])

    def test_missing_download_404(self) -> None:
        resp = self.client.get("/v1/downloads/missing", headers=self.user)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Download not found")


class TestListing(DownloadsTestCase):
    def test_list_newest_first_with_commands(self) -> None:
        first = self.create(displayName="One", commands=["1a", "1b"])
        second = self.create(displayName="Two", commands=["2a"])
        downloads = self.client.get("/v1/downloads", headers=self.user).json()["downloads"]
        self.assertEqual([d["id"] for d in downloads], [second["id"], first["id"]])
        self.assertEqual([c["command"] for c in downloads[1]["commands"]], ["1a", "1b"])
        self.assertNotIn("scriptContent", downloads[0])

    def test_recent_limited_and_condensed(self) -> None:
        for i in range(7):
            self.create(displayName=f"App {i}")
        recent = self.client.get("/v1/downloads/recent", headers=self.user).json()["downloads"]
        self.assertEqual(len(recent), 5)
        self.assertEqual(recent[0]["displayName"], "App 6")
        self.assertNotIn("commands", recent[0])

    def test_stats(self) -> None:
        self.create(installType="single")
        self.create(installType="multi")
        self.create(installType="multi")
        stats = self.client.get("/v1/downloads/stats", headers=self.user).json()["stats"]
        self.assertEqual(
            stats,
            {"totalDownloads": 3, "singleInstall": 1, "multiInstall": 2, "activeUsers": 2},
        )

    def test_list_requires_auth(self) -> None:
        self.assertEqual(self.client.get("/v1/downloads").status_code, 401)


class TestUpdate(DownloadsTestCase):
    def test_commands_fully_replaced(self) -> None:
        created = self.create(commands=["old-1", "old-2", "old-3"])
        old_ids = {c["id"] for c in created["commands"]}

        resp = self.client.put(
            f"/v1/downloads/{created['id']}",
            json={"commands": ["new-1", "new-2"]},
            headers=self.admin,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        commands = resp.json()["download"]["commands"]
        self.assertEqual([c["command"] for c in commands], ["new-1", "new-2"])
        self.assertEqual([c["sortOrder"] for c in commands], [0, 1])

        with self.SessionLocal() as db:
            stored = db.scalars(
                select(DownloadCommand).where(DownloadCommand.download_id == created["id"])
            ).all()
        self.assertEqual(len(stored), 2)
        self.assertTrue(old_ids.isdisjoint({c.id for c in stored}))

    def test_partial_update_keeps_other_fields(self) -> None:
        created = self.create(description="keep me", commands=["x"])
        resp = self.client.put(
            f"/v1/downloads/{created['id']}",
            json={"displayName": "Renamed"},
            headers=self.admin,
        )
        download = resp.json()["download"]
        self.assertEqual(download["displayName"], "Renamed")
        self.assertEqual(download["description"], "keep me")
        self.assertEqual([c["command"] for c in download["commands"]], ["x"])

    def test_nullable_field_cleared(self) -> None:
        created = self.create()
        resp = self.client.put(
            f"/v1/downloads/{created['id']}", json={"packageId": None}, headers=self.admin
        )
        self.assertIsNone(resp.json()["download"]["packageId"])

    def test_null_for_required_field_rejected(self) -> None:
        created = self.create()
        resp = self.client.put(
            f"/v1/downloads/{created['id']}", json={"displayName": None}, headers=self.admin
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("displayName", resp.json()["details"])

    def test_empty_commands_clears_set(self) -> None:
        created = self.create(commands=["a"])
        resp = self.client.put(
            f"/v1/downloads/{created['id']}", json={"commands": []}, headers=self.admin
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["download"]["commands"], [])

    def test_update_missing(self) -> None:
        resp = self.client.put(
            "/v1/downloads/missing", json={"displayName": "x"}, headers=self.admin
        )
        self.assertEqual(resp.status_code, 404)

    def test_user_cannot_update(self) -> None:
        created = self.create()
        resp = self.client.put(
            f"/v1/downloads/{created['id']}", json={"displayName": "x"}, headers=self.user
        )
        self.assertEqual(resp.status_code, 403)


class TestDelete(DownloadsTestCase):
    def test_delete_removes_commands(self) -> None:
        created = self.create(commands=["a", "b"])
        resp = self.client.delete(f"/v1/downloads/{created['id']}", headers=self.admin)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])
        self.assertEqual(
            self.client.get(f"/v1/downloads/{created['id']}", headers=self.user).status_code,
            404,
        )
        with self.SessionLocal() as db:
            left = db.scalars(
                select(DownloadCommand).where(DownloadCommand.download_id == created["id"])
            ).all()
        self.assertEqual(left, [])

    def test_delete_missing(self) -> None:
        resp = self.client.delete("/v1/downloads/missing", headers=self.admin)
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
