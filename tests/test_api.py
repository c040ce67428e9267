from __future__ import annotations

import io

from voxlate.ui_web.app import create_app


def test_catalog_is_loaded_at_startup(client, google):
    response = client.get("/api/languages")

    assert response.status_code == 200
    codes = [item["code"] for item in response.get_json()["languages"]]
    assert codes == ["es", "en", "de", "fr", "it"]
    assert response.get_json()["languages"][0]["label"] == "Español"
    assert len(google.calls("/language/translate/v2/languages")) == 1


def test_startup_survives_catalog_failure(google, session):
    google.failures["/language/translate/v2/languages"] = 500
    app = create_app({"TESTING": True, "VOXLATE_SESSION": session})

    response = app.test_client().get("/api/languages")
    assert response.get_json() == {"languages": []}


def test_translate_endpoint_returns_state(client):
    response = client.post("/api/translate", json={"text": "hola", "source": "es", "target": "en"})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["inputText"] == "hola"
    assert payload["translatedText"] == "hello"
    assert payload["busy"] is False


def test_translate_failure_maps_to_bad_gateway(client, google):
    google.failures["/language/translate/v2"] = 500

    response = client.post("/api/translate", json={"text": "hola"})

    assert response.status_code == 502
    payload = response.get_json()
    assert payload["error"]["code"] == "service_unavailable"
    assert payload["state"]["translatedText"] == ""


def test_swap_endpoint(client):
    client.post("/api/translate", json={"text": "hola"})

    payload = client.post("/api/swap").get_json()

    assert (payload["sourceLang"], payload["targetLang"]) == ("en", "es")
    assert (payload["inputText"], payload["translatedText"]) == ("hello", "hola")


def test_record_cycle(client, google):
    assert client.post("/api/record/start").get_json()["isRecording"] is True
    assert client.post("/api/record/start").status_code == 409

    response = client.post("/api/record/stop")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["isRecording"] is False
    assert payload["inputText"] == "hola"
    assert payload["translatedText"] == "hello"


def test_transcribe_upload(client, wav_bytes):
    data = {"audio": (io.BytesIO(wav_bytes), "sample.wav", "audio/wav")}

    response = client.post("/api/transcribe", data=data, content_type="multipart/form-data")

    assert response.status_code == 200
    assert response.get_json()["translatedText"] == "hello"


def test_transcribe_rejects_unsupported_upload(client):
    data = {"audio": (io.BytesIO(b"ID3"), "sample.mp3", "audio/mpeg")}

    response = client.post("/api/transcribe", data=data, content_type="multipart/form-data")

    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unsupported_type"


def test_speak_without_translation_is_a_no_op(client):
    payload = client.post("/api/speak").get_json()

    assert payload["speaking"] is False


def test_settings_roundtrip(client):
    response = client.post("/api/settings", json={"target_language": "fr", "speech_rate": 170, "unknown": 1})
    assert response.status_code == 200
    updated = response.get_json()
    assert updated["target_language"] == "fr"
    assert updated["speech_rate"] == 170
    assert "unknown" not in updated

    fetched = client.get("/api/settings").get_json()
    assert fetched["target_language"] == "fr"


def test_settings_change_target_language(client):
    client.post("/api/settings", json={"target_language": "fr"})

    assert client.get("/api/state").get_json()["targetLang"] == "fr"


def test_select_default_source_keeps_current(client):
    payload = client.post("/api/languages/select", json={"source": "default", "target": "de"}).get_json()

    assert (payload["sourceLang"], payload["targetLang"]) == ("es", "de")
