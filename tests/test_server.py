"""
Module: tests.test_server
Purpose: Tests for the FastAPI session endpoints
"""

import asyncio
import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerator, make_image_bytes
from aspect_gen import server
from aspect_gen.core import AspectSession
from aspect_gen.errors import NoImageInResponseError
from aspect_gen.schemas import ImageBlob


@pytest.fixture
def generator(result_blob):
    return FakeGenerator(result=result_blob)


@pytest.fixture
def client(generator):
    server.set_session(AspectSession(generator=generator))
    yield TestClient(server.app)
    server.set_session(None)


def test_root_and_ratios(client):
    assert client.get("/").json()["name"] == "AspectRatioAI API"
    assert client.get("/ratios").json() == ["1:1", "3:4", "4:3", "9:16", "16:9"]


def test_health_reports_credential(client, no_api_key):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["model_id"] == "gemini-2.5-flash-image"
    assert body["credential_configured"] is False


def test_initial_state(client):
    body = client.get("/state").json()
    assert body["status"] == "IDLE"
    assert body["active_view"] == "original"
    assert body["selected_ratio"] == "9:16"
    assert body["original"] is None
    assert body["generated"] is None


def test_upload_generate_view_download(client, png_blob, result_blob):
    body = client.post("/image", json={"image": png_blob.data_uri}).json()
    assert body["original"]["data_uri"] == png_blob.data_uri
    assert (body["original"]["width"], body["original"]["height"]) == (8, 6)

    body = client.post("/generate", json={"ratio": "16:9"}).json()
    assert body["status"] == "SUCCESS"
    assert body["active_view"] == "generated"
    assert body["selected_ratio"] == "16:9"
    assert body["generated"]["data_uri"] == result_blob.data_uri
    assert (body["generated"]["width"], body["generated"]["height"]) == (16, 9)

    response = client.get("/download")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert 'filename="image-generated-' in response.headers["content-disposition"]
    assert response.content == result_blob.to_bytes()

    body = client.post("/view", json={"view": "original"}).json()
    assert body["active_view"] == "original"
    assert 'filename="image-original-' in client.get("/download").headers["content-disposition"]


def test_generate_uses_selected_ratio(client, generator, png_blob):
    client.post("/image", json={"image": png_blob.data_uri})
    assert client.post("/ratio", json={"ratio": "3:4"}).status_code == 200

    client.post("/generate")

    assert generator.calls[0][1].value == "3:4"


def test_download_transcodes_jpeg_to_png(client):
    jpeg = ImageBlob.from_bytes(make_image_bytes(fmt="JPEG"), "image/jpeg")
    client.post("/image", json={"image": jpeg.data_uri})

    response = client.get("/download")

    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_generation_failure_is_reported_in_state(client, generator, png_blob):
    generator.error = NoImageInResponseError()
    client.post("/image", json={"image": png_blob.data_uri})

    response = client.post("/generate", json={"ratio": "1:1"})

    assert response.status_code == 200
    assert response.json()["status"] == "ERROR"
    assert response.json()["error_message"] == "No image data found in the response."


def test_rejects_non_image_upload(client):
    response = client.post("/image", json={"image": "data:text/plain;base64,aGVsbG8="})
    assert response.status_code == 415


def test_rejects_malformed_upload(client):
    assert client.post("/image", json={"image": "hello"}).status_code == 400


def test_rejects_unknown_ratio(client, png_blob):
    client.post("/image", json={"image": png_blob.data_uri})
    assert client.post("/generate", json={"ratio": "2:1"}).status_code == 422


def test_conflicts_and_missing_images(client):
    assert client.post("/generate", json={"ratio": "1:1"}).status_code == 409
    assert client.post("/view", json={"view": "generated"}).status_code == 409
    assert client.get("/download").status_code == 404


def test_reset_requires_confirmation(client, png_blob):
    client.post("/image", json={"image": png_blob.data_uri})

    assert client.post("/reset", json={"confirm": False}).status_code == 400
    assert client.get("/state").json()["original"] is not None

    body = client.post("/reset", json={"confirm": True}).json()
    assert body["original"] is None
    assert body["status"] == "IDLE"


SVG_URI = "data:image/svg+xml;base64," + base64.b64encode(
    b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"/>'
).decode("ascii")


def test_svg_download_is_unprocessable(client):
    assert client.post("/image", json={"image": SVG_URI}).status_code == 200

    response = client.get("/download")

    assert response.status_code == 422
    assert "PNG" in response.json()["detail"]


def test_upload_with_bad_base64_is_rejected(client):
    assert client.post("/image", json={"image": "data:image/png;base64,A"}).status_code == 400
    assert client.get("/state").json()["original"] is None


def test_download_of_undecodable_original_is_unprocessable(client):
    server.get_session().select_image("data:image/png;base64,A")
    assert client.get("/download").status_code == 422


def test_generate_conflicts_while_request_in_flight(generator, png_blob):
    session = AspectSession(generator=generator)
    session.select_image(png_blob)
    server.set_session(session)

    async def scenario():
        generator.gate = asyncio.Event()
        transport = httpx.ASGITransport(app=server.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
            first = asyncio.create_task(http.post("/generate", json={"ratio": "1:1"}))
            for _ in range(200):
                if session.is_loading:
                    break
                await asyncio.sleep(0)
            assert session.is_loading

            second = await http.post("/generate", json={"ratio": "16:9"})
            generator.gate.set()
            return await first, second

    try:
        first, second = asyncio.run(scenario())
    finally:
        server.set_session(None)

    assert second.status_code == 409
    assert first.json()["status"] == "SUCCESS"
    assert len(generator.calls) == 1
