# scheduler/api_client.py
from __future__ import annotations

import http.client
import json
import socket
import urllib.error
import urllib.request
from typing import Optional, Protocol
from urllib.parse import urljoin

from ..errors import RegistrationError
from ..model import CanonicalJob


class SchedulerGateway(Protocol):
    def register(self, job: CanonicalJob) -> str:
        """Submit a job and return the scheduler's evaluation id."""
        ...


class NomadClient:
    """HTTP client for the Nomad job registration API."""

    def __init__(self, address: str, token: Optional[str] = None, timeout: float = 10.0):
        """
        Initialize Nomad client.

        Args:
            address: Base URL of the Nomad agent (e.g., "http://127.0.0.1:4646")
            token: Optional ACL token sent as X-Nomad-Token
            timeout: Seconds to wait for the registration call
        """
        # Ensure address doesn't end with /
        self.address = address.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> dict:
        """
        Make an HTTP request to the Nomad API.

        Raises:
            RegistrationError: If the request fails or the response isn't JSON
        """
        url = urljoin(self.address + "/", path.lstrip("/"))

        req_headers = {
            "Content-Type": "application/json",
        }
        if self.token:
            req_headers["X-Nomad-Token"] = self.token

        req_data = None
        if data is not None:
            req_data = json.dumps(data).encode("utf-8")

        req = urllib.request.Request(url, data=req_data, headers=req_headers, method=method)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                response_data = response.read().decode("utf-8")
                if response_data:
                    return json.loads(response_data)
                return {}
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            raise RegistrationError(f"Nomad request failed: {e.code} {e.reason}. {error_body}".strip())
        except urllib.error.URLError as e:
            raise RegistrationError(f"Network error: {e.reason}")
        except (socket.timeout, TimeoutError):
            raise RegistrationError(f"Nomad request timed out after {self.timeout}s")
        except (OSError, http.client.HTTPException) as e:
            raise RegistrationError(f"Connection to Nomad failed: {e!r}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RegistrationError(f"Invalid JSON response: {e}")

    def register(self, job: CanonicalJob) -> str:
        """
        Register a job with Nomad.

        Returns:
            The evaluation id Nomad created for the job
        """
        response = self._request("PUT", "/v1/jobs", data=job.to_nomad())
        eval_id = response.get("EvalID") if isinstance(response, dict) else None
        if not eval_id:
            raise RegistrationError(f"Nomad response has no EvalID: {response!r}")
        return eval_id
