import io
import xml.etree.ElementTree as ET

import pytest

from pdfxml_web.app import create_app


@pytest.fixture
def app(tmp_path):
    return create_app(
        {
            "TESTING": True,
            "DATABASE": str(tmp_path / "web.db"),
            "CONFIG_PATH": str(tmp_path / "pdfxml.cfg"),
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


def upload(client, data, filename="report.pdf", user_id="alice", **extra):
    form = {"user_id": user_id, "file": (io.BytesIO(data), filename)}
    form.update(extra)
    return client.post("/api/conversions/", data=form, content_type="multipart/form-data")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_upload_converts_and_stores(client, sample_pdf_bytes):
    response = upload(client, sample_pdf_bytes)
    assert response.status_code == 201
    summary = response.get_json()
    assert summary["file_name"] == "report.pdf"
    assert summary["page_count"] == 2
    assert "xml_content" not in summary

    listed = client.get("/api/conversions/?user_id=alice").get_json()
    assert [c["id"] for c in listed] == [summary["id"]]

    full = client.get(f"/api/conversions/{summary['id']}").get_json()
    root = ET.fromstring(full["xml_content"].encode("utf-8"))
    assert root.findtext("content/page/headers/h1") == "Annual Report"


def test_download_uses_xml_file_name(client, sample_pdf_bytes):
    conversion_id = upload(client, sample_pdf_bytes, filename="Minutes 2024.pdf").get_json()["id"]
    response = client.get(f"/api/conversions/{conversion_id}/download")
    assert response.status_code == 200
    assert response.mimetype == "application/xml"
    assert 'filename="Minutes 2024.xml"' in response.headers["Content-Disposition"]
    assert response.data.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')


def test_list_is_per_user(client, sample_pdf_bytes):
    upload(client, sample_pdf_bytes, user_id="alice")
    upload(client, sample_pdf_bytes, user_id="bob")
    upload(client, sample_pdf_bytes, user_id="bob")
    assert len(client.get("/api/conversions/?user_id=alice").get_json()) == 1
    bob = client.get("/api/conversions/?user_id=bob").get_json()
    assert len(bob) == 2
    assert bob[0]["id"] > bob[1]["id"]


def test_delete(client, sample_pdf_bytes):
    conversion_id = upload(client, sample_pdf_bytes).get_json()["id"]
    assert client.delete(f"/api/conversions/{conversion_id}").status_code == 204
    assert client.get(f"/api/conversions/{conversion_id}").status_code == 404
    assert client.delete(f"/api/conversions/{conversion_id}").status_code == 404


def test_unknown_conversion(client):
    assert client.get("/api/conversions/42").status_code == 404
    assert client.get("/api/conversions/42/download").status_code == 404


def test_missing_user_id(client, sample_pdf_bytes):
    assert upload(client, sample_pdf_bytes, user_id="").status_code == 400
    assert client.get("/api/conversions/").status_code == 400


def test_missing_file(client):
    response = client.post(
        "/api/conversions/", data={"user_id": "alice"}, content_type="multipart/form-data"
    )
    assert response.status_code == 400


def test_non_pdf_upload_is_rejected(client):
    response = upload(client, b"hello", filename="notes.txt")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Please select a PDF file"


def test_corrupt_pdf_is_not_persisted(client):
    response = upload(client, b"%PDF-1.4 this is not really a pdf", filename="broken.pdf")
    assert response.status_code == 422
    assert response.get_json()["error"] in (
        "Failed to parse PDF. Please try again with a different file.",
        "The PDF contains no pages.",
    )
    assert client.get("/api/conversions/?user_id=alice").get_json() == []


def test_upload_limit_comes_from_config(app, client, sample_pdf_bytes):
    app.config_service.save_settings({"Conversion": {"max_upload_mb": 0}})
    response = upload(client, sample_pdf_bytes)
    assert response.status_code == 413
    assert client.get("/api/conversions/?user_id=alice").get_json() == []
