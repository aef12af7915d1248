"""
API tests for the auth and session routes.

Run: pytest tests/test_sessions_api.py -v
"""

from io import BytesIO
from urllib.parse import quote

from openpyxl import load_workbook


def open_session(client, mode="COUNT", username="alice", password="pw1"):
    response = client.post("/api/sessions", json={
        "username": username,
        "password": password,
        "mode": mode,
    })
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    """Tests for the health endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_valid_login(self, test_client):
        response = test_client.post("/api/auth/login", json={"username": "alice", "password": "pw1"})

        assert response.status_code == 200
        assert response.json() == {"username": "alice", "store_name": "测试门店A"}

    def test_wrong_password(self, test_client):
        response = test_client.post("/api/auth/login", json={"username": "alice", "password": "nope"})

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "INVALID_CREDENTIALS"
        assert error["message"] == "用户名或密码错误"

    def test_missing_fields(self, test_client):
        response = test_client.post("/api/auth/login", json={"username": "alice"})
        assert response.status_code == 422


class TestTemplate:
    """Tests for GET /api/auth/template."""

    def test_one_sheet_per_store(self, test_client):
        response = test_client.get("/api/auth/template")

        assert response.status_code == 200
        assert "products.xlsx" in response.headers["content-disposition"]
        wb = load_workbook(BytesIO(response.content))
        assert wb.sheetnames == ["测试门店A", "测试门店B"]


class TestOpenSession:
    """Tests for POST /api/sessions."""

    def test_count_session(self, test_client):
        state = open_session(test_client, mode="COUNT")

        assert state["mode"] == "COUNT"
        assert state["operator"]["store_name"] == "测试门店A"
        assert state["current_index"] == 0
        assert state["current_item"]["name"] == "鲜奶"
        assert state["current_item"]["status"] == "PENDING"
        assert state["progress"]["completed"] == 0
        assert state["progress"]["total"] == 2
        assert state["progress"]["ratio"] == 0.0
        assert state["can_skip"] is False
        assert state["labels"]["system_name"] == "盘点系统"
        assert state["labels"]["quantity_header"] == "盘点数量"

    def test_order_session_labels(self, test_client):
        state = open_session(test_client, mode="ORDER")

        assert state["can_skip"] is True
        assert state["labels"]["document_type"] == "订货单"
        assert state["labels"]["finish_label"] == "结束订货"

    def test_store_without_sheet_gets_defaults(self, test_client):
        state = open_session(test_client, username="bob", password="pw2")
        assert state["progress"]["total"] == 4

    def test_bad_credentials(self, test_client):
        response = test_client.post("/api/sessions", json={
            "username": "alice",
            "password": "nope",
            "mode": "COUNT",
        })
        assert response.status_code == 401

    def test_unknown_mode(self, test_client):
        response = test_client.post("/api/sessions", json={
            "username": "alice",
            "password": "pw1",
            "mode": "AUDIT",
        })
        assert response.status_code == 422

    def test_get_and_discard(self, test_client):
        session_id = open_session(test_client)["id"]

        assert test_client.get(f"/api/sessions/{session_id}").status_code == 200
        assert test_client.delete(f"/api/sessions/{session_id}").status_code == 204

        response = test_client.get(f"/api/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


class TestSessionCommands:
    """Tests for input, navigation and item actions."""

    def test_input_next_previous(self, test_client):
        session_id = open_session(test_client)["id"]

        state = test_client.put(f"/api/sessions/{session_id}/input", json={"text": "5"}).json()
        assert state["staged_text"] == "5"
        assert state["progress"]["completed"] == 0

        state = test_client.post(f"/api/sessions/{session_id}/next").json()
        assert state["current_index"] == 1
        assert state["progress"]["completed"] == 1
        assert state["progress"]["ratio"] == 0.5
        assert state["progress"]["pending"] == 1
        assert state["at_last"] is True

        state = test_client.post(f"/api/sessions/{session_id}/previous").json()
        assert state["current_index"] == 0
        assert state["staged_text"] == "5"
        assert state["current_item"]["status"] == "COMPLETED"

    def test_skip_in_count_mode_rejected(self, test_client):
        session_id = open_session(test_client, mode="COUNT")["id"]

        response = test_client.post(f"/api/sessions/{session_id}/skip")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_MODE_OPERATION"

    def test_skip_in_order_mode(self, test_client):
        session_id = open_session(test_client, mode="ORDER")["id"]

        state = test_client.post(f"/api/sessions/{session_id}/skip").json()

        assert state["current_index"] == 1
        items = test_client.get(f"/api/sessions/{session_id}/items").json()["data"]
        assert items[0]["item"]["status"] == "SKIPPED"

    def test_toggle_unused(self, test_client):
        session_id = open_session(test_client)["id"]

        state = test_client.post(f"/api/sessions/{session_id}/unused").json()

        assert state["current_index"] == 1
        assert state["progress"]["completed"] == 1

    def test_correct_item(self, test_client):
        session_id = open_session(test_client)["id"]

        state = test_client.post(f"/api/sessions/{session_id}/correct", json={
            "name": "全脂鲜奶",
            "spec": "950ml/盒",
            "unit": "盒",
        }).json()

        item = state["current_item"]
        assert item["name"] == "全脂鲜奶"
        assert item["has_error"] is True
        assert item["original_name"] == "鲜奶"

    def test_append_item(self, test_client):
        session_id = open_session(test_client)["id"]

        response = test_client.post(f"/api/sessions/{session_id}/items", json={"name": "冰块", "quantity": "3"})

        assert response.status_code == 201
        item = response.json()
        assert item["id"] == "new-2"
        assert item["is_new"] is True
        assert item["spec"] == "无规格"
        state = test_client.get(f"/api/sessions/{session_id}").json()
        assert state["progress"]["completed"] == 1
        assert state["progress"]["total"] == 3
        assert state["current_index"] == 0

    def test_jump_to_index(self, test_client):
        session_id = open_session(test_client)["id"]

        state = test_client.post(f"/api/sessions/{session_id}/jump/1").json()
        assert state["current_index"] == 1

        response = test_client.post(f"/api/sessions/{session_id}/jump/9")
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_CURSOR_POSITION"

    def test_jump_to_first_pending(self, test_client):
        session_id = open_session(test_client)["id"]
        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "1"})

        result = test_client.post(f"/api/sessions/{session_id}/jump/pending").json()
        assert result["all_processed"] is False
        assert result["state"]["current_index"] == 1

        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "2"})
        result = test_client.post(f"/api/sessions/{session_id}/jump/pending").json()
        assert result["all_processed"] is True
        assert result["message"] == "所有货品已处理完毕！"
        assert result["state"]["current_index"] == 1

    def test_list_filters(self, test_client):
        session_id = open_session(test_client)["id"]
        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "1"})
        test_client.post(f"/api/sessions/{session_id}/next")

        processed = test_client.get(f"/api/sessions/{session_id}/items", params={"status": "processed"}).json()
        pending = test_client.get(f"/api/sessions/{session_id}/items", params={"status": "pending"}).json()

        assert [e["index"] for e in processed["data"]] == [0]
        assert [e["index"] for e in pending["data"]] == [1]

    def test_list_bad_filter(self, test_client):
        session_id = open_session(test_client)["id"]
        response = test_client.get(f"/api/sessions/{session_id}/items", params={"status": "all"})
        assert response.status_code == 422


class TestFinishAndExport:
    """Tests for finish and export."""

    def test_finish_with_pending(self, test_client):
        session_id = open_session(test_client)["id"]

        result = test_client.post(f"/api/sessions/{session_id}/finish").json()

        assert result["pending_count"] == 2
        assert result["confirmation"]["required"] is True
        assert result["confirmation"]["message"] == "还有 2 个货品未处理，确定要结束吗？"

    def test_finish_commits_focused_item(self, test_client):
        session_id = open_session(test_client)["id"]
        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "1"})
        test_client.post(f"/api/sessions/{session_id}/next")
        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "2"})

        result = test_client.post(f"/api/sessions/{session_id}/finish").json()

        assert result["pending_count"] == 0
        assert result["confirmation"]["required"] is False

    def test_export_download(self, test_client):
        session_id = open_session(test_client, mode="ORDER")["id"]
        test_client.put(f"/api/sessions/{session_id}/input", json={"text": "4"})
        test_client.post(f"/api/sessions/{session_id}/next")
        test_client.post(f"/api/sessions/{session_id}/skip")

        response = test_client.get(f"/api/sessions/{session_id}/export", params={"layout": "flat"})

        assert response.status_code == 200
        assert quote("测试门店A_订货单_alice_") in response.headers["content-disposition"]
        ws = load_workbook(BytesIO(response.content)).active
        assert ws["E1"].value == "订货数量"
        assert ws["E2"].value == "4"
        assert ws["E3"].value == "无需订货"

    def test_export_with_header(self, test_client):
        session_id = open_session(test_client)["id"]

        response = test_client.get(f"/api/sessions/{session_id}/export", params={"layout": "with_header"})

        ws = load_workbook(BytesIO(response.content)).active
        assert ws["A1"].value == "门店"
        assert ws["B3"].value == "盘点单"
        assert ws["A7"].value == "序号"

    def test_export_info(self, test_client):
        session_id = open_session(test_client, mode="ORDER")["id"]

        info = test_client.get(f"/api/sessions/{session_id}/export/info").json()

        assert info["file_name"].startswith("测试门店A_订货单_alice_")
        assert info["file_name"].endswith(".xlsx")
        assert info["share_message"] == "这是 测试门店A 的订货单，请查收。"
        assert info["row_count"] == 2
