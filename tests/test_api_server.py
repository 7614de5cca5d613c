import base64
import io

import cv2
import numpy as np
import pytest

from api_server import create_app
from services.frame_processor_service import FrameProcessorService
from services.mask_service import MaskService


@pytest.fixture
def client():
    processor = FrameProcessorService(mask_service=MaskService(workers=1), workers=3)
    app = create_app(processor)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    processor.close()


def png_upload(rgb=(128, 64, 32), size=(6, 4)):
    w, h = size
    bgr = np.zeros((h, w, 3), dtype=np.uint8)
    bgr[:] = rgb[::-1]
    ok, png = cv2.imencode(".png", bgr)
    assert ok
    return {"frame": (io.BytesIO(png.tobytes()), "frame.png")}


def test_health(client):
    body = client.get("/api/health").get_json()
    assert body["status"] == "healthy"


def test_process_frame_returns_image_and_center_color(client):
    resp = client.post("/api/process-frame", data=png_upload(), content_type="multipart/form-data")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert (body["width"], body["height"]) == (6, 4)
    assert body["center_color"]["rgb_string"] == "R:128 G:64 B:32"
    assert body["center_color"]["hex"] == "#804020"
    assert body["active_categories"] == []
    png = base64.b64decode(body["image"].split(",", 1)[1])
    assert png.startswith(b"\x89PNG")


def test_latest_frame(client):
    assert client.get("/api/frame/latest").status_code == 404
    client.post("/api/process-frame", data=png_upload(), content_type="multipart/form-data")
    resp = client.get("/api/frame/latest")
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"


def test_process_frame_rejects_bad_uploads(client):
    assert client.post("/api/process-frame", data={}, content_type="multipart/form-data").status_code == 400
    garbage = {"frame": (io.BytesIO(b"nope"), "frame.png")}
    assert client.post("/api/process-frame", data=garbage, content_type="multipart/form-data").status_code == 400
    wrong_ext = {"frame": (io.BytesIO(b"nope"), "frame.txt")}
    assert client.post("/api/process-frame", data=wrong_ext, content_type="multipart/form-data").status_code == 400


def test_selection_endpoints(client):
    for color in ("red", "green", "blue"):
        state = client.post("/api/toggle-color", json={"color": color}).get_json()["state"]
    assert state["manual_colors"] == ["green", "blue"]
    assert state["source"] == "manual"

    state = client.post("/api/vision-mode", json={"mode": "tritanomaly"}).get_json()["state"]
    assert state["vision_mode"] == "tritanomaly"
    assert state["source"] == "vision_mode"

    body = client.post("/api/process-frame", data=png_upload((20, 20, 220)),
                       content_type="multipart/form-data").get_json()
    assert body["active_categories"] == ["blue", "yellow"]

    state = client.post("/api/grayscale", json={"enabled": True}).get_json()["state"]
    assert state["grayscale_background"] is True
    assert client.post("/api/manual-colors").get_json()["state"]["source"] == "manual"
    assert client.get("/api/state").get_json()["manual_colors"] == ["green", "blue"]

    reset = client.post("/api/reset").get_json()["state"]
    assert reset["manual_colors"] == [] and reset["vision_mode"] == "normal"


def test_selection_endpoints_validate_input(client):
    assert client.post("/api/toggle-color", json={"color": "purple"}).status_code == 400
    assert client.post("/api/vision-mode", json={"mode": "x"}).status_code == 400
    assert client.post("/api/grayscale", json={"enabled": "yes"}).status_code == 400


@pytest.mark.parametrize("body", [["red"], "red", 3, None])
def test_selection_endpoints_reject_non_object_json(client, body):
    for url in ("/api/toggle-color", "/api/vision-mode", "/api/grayscale"):
        resp = client.post(url, json=body)
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False


def test_catalog(client):
    body = client.get("/api/catalog").get_json()
    assert [c["id"] for c in body["colors"]] == ["red", "green", "blue", "yellow"]
    red = body["colors"][0]
    assert red["hue_range"] == [330.0, 30.0]
    modes = {m["id"]: m for m in body["vision_modes"]}
    assert modes["tritanomaly"]["highlights"] == ["blue", "yellow"]
    assert modes["normal"]["symbol"] == "NV"
