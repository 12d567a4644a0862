import http.client
import io
import json
import socket
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from jobbuilder.assembler import assemble
from jobbuilder.errors import RegistrationError
from jobbuilder.model import JobSpec
from jobbuilder.scheduler import NomadClient


def _job():
    return assemble(JobSpec(driver="docker", config={"image": "alpine"}), "s3://b/k", lambda: 1)


def _response(body: bytes):
    response = MagicMock()
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class TestNomadClient:
    def test_register_returns_eval_id(self):
        client = NomadClient("http://nomad.test:4646/", token="secret", timeout=3)
        job = _job()

        with patch("urllib.request.urlopen", return_value=_response(b'{"EvalID": "ev-1"}')) as urlopen:
            assert client.register(job) == "ev-1"

        req = urlopen.call_args.args[0]
        assert urlopen.call_args.kwargs["timeout"] == 3
        assert req.full_url == "http://nomad.test:4646/v1/jobs"
        assert req.get_method() == "PUT"
        assert req.get_header("X-nomad-token") == "secret"
        assert req.get_header("Content-type") == "application/json"
        assert json.loads(req.data) == job.to_nomad()

    def test_no_token_header_by_default(self):
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", return_value=_response(b'{"EvalID": "ev-1"}')) as urlopen:
            client.register(_job())
        assert not urlopen.call_args.args[0].has_header("X-nomad-token")

    def test_http_error(self):
        err = urllib.error.HTTPError(
            "http://nomad.test:4646/v1/jobs", 500, "Internal Server Error", {}, io.BytesIO(b"boom")
        )
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", side_effect=err) as urlopen:
            with pytest.raises(RegistrationError, match="500"):
                client.register(_job())
        assert urlopen.call_count == 1

    def test_network_error(self):
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            with pytest.raises(RegistrationError, match="Network error"):
                client.register(_job())

    def test_timeout(self):
        client = NomadClient("http://nomad.test:4646", timeout=0.5)
        with patch("urllib.request.urlopen", side_effect=socket.timeout("timed out")) as urlopen:
            with pytest.raises(RegistrationError, match="timed out"):
                client.register(_job())
        assert urlopen.call_count == 1

    def test_connection_dropped(self):
        client = NomadClient("http://nomad.test:4646")
        dropped = http.client.RemoteDisconnected("Remote end closed connection without response")
        with patch("urllib.request.urlopen", side_effect=dropped) as urlopen:
            with pytest.raises(RegistrationError, match="Connection to Nomad failed"):
                client.register(_job())
        assert urlopen.call_count == 1

    def test_connection_reset(self):
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", side_effect=ConnectionResetError(104, "reset")):
            with pytest.raises(RegistrationError):
                client.register(_job())

    def test_invalid_json(self):
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", return_value=_response(b"<html>")):
            with pytest.raises(RegistrationError, match="Invalid JSON"):
                client.register(_job())

    def test_missing_eval_id(self):
        client = NomadClient("http://nomad.test:4646")
        with patch("urllib.request.urlopen", return_value=_response(b'{"Warnings": ""}')):
            with pytest.raises(RegistrationError, match="EvalID"):
                client.register(_job())
