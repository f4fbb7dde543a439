import io
import os

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"receipt-pixels" * 8


def _upload(client, headers, data=PNG_BYTES, filename="lunch receipt.png", endpoint="/api/upload/receipt"):
    return client.post(
        endpoint,
        data={"receipt": (io.BytesIO(data), filename)},
        headers=headers,
        content_type="multipart/form-data",
    )


def test_upload_and_fetch_receipt(client, app, seed):
    response = _upload(client, seed.headers["employee"])

    assert response.status_code == 201
    info = response.get_json()["file"]
    assert info["original_name"] == "lunch_receipt.png"
    assert info["mimetype"] == "image/png"
    assert info["filename"].startswith(f"{seed.company_id}_{seed.ids['employee']}_")
    assert info["filename"].endswith(".png")
    assert os.path.isfile(os.path.join(app.config["UPLOAD_FOLDER"], info["filename"]))

    fetched = client.get(info["url"], headers=seed.headers["manager"])
    assert fetched.status_code == 200
    assert fetched.data == PNG_BYTES


def test_upload_rejects_other_types(client, seed):
    response = _upload(client, seed.headers["employee"], data=b"#!/bin/sh", filename="script.sh")
    assert response.status_code == 400


def test_upload_requires_file(client, seed):
    response = client.post("/api/upload/receipt", data={}, headers=seed.headers["employee"])
    assert response.status_code == 400


def test_receipts_are_tenant_scoped(client, seed):
    info = _upload(client, seed.headers["employee"]).get_json()["file"]

    assert client.get(info["url"], headers=seed.headers["outsider"]).status_code == 404
    assert client.delete(info["url"], headers=seed.headers["outsider"]).status_code == 404


def test_missing_receipt_is_404(client, seed):
    response = client.get(f"/api/upload/receipt/{seed.company_id}_1_missing.png", headers=seed.headers["admin"])
    assert response.status_code == 404


def test_delete_receipt(client, app, seed):
    info = _upload(client, seed.headers["employee"]).get_json()["file"]

    assert client.delete(info["url"], headers=seed.headers["peer"]).status_code == 403
    assert client.delete(info["url"], headers=seed.headers["employee"]).status_code == 200
    assert not os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], info["filename"]))
    assert client.delete(info["url"], headers=seed.headers["employee"]).status_code == 404


def test_ocr_is_deterministic(client, seed):
    first = _upload(client, seed.headers["employee"], endpoint="/api/upload/ocr")
    second = _upload(client, seed.headers["employee"], endpoint="/api/upload/ocr")

    assert first.status_code == 201
    first_ocr = first.get_json()["ocr"]
    second_ocr = second.get_json()["ocr"]
    assert first_ocr["status"] == "mock_ocr"
    assert first_ocr["currency"] == "INR"
    assert 100 <= first_ocr["amount"] < 5000
    assert first_ocr["category"] in {"FOOD", "TRAVEL", "OFFICE", "OTHER"}
    for key in ("amount", "merchant", "category", "confidence"):
        assert first_ocr[key] == second_ocr[key]
    assert first.get_json()["file"]["filename"] != second.get_json()["file"]["filename"]
