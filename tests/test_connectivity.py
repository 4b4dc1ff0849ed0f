import pytest
import requests
import responses
from unittest.mock import patch

from hotspot_login.connectivity import ConnectivityProbe


PROBE_URL = "http://probe.test/"


# =================================
# TEST GROUP: Internet Connectivity
# =================================
# Function: ConnectivityProbe.is_connected()
# ------------------------------------------
@pytest.mark.parametrize(
    "status, expected_result",
    [
        # ✅ Plain OK
        (200, True),

        # ✅ Any 2xx counts
        (204, True),

        # ❌ Redirect without a Location to follow
        (302, False),

        # ❌ Client / server errors
        (403, False),
        (503, False),
    ],
)

@responses.activate
def test_is_connected_status(status, expected_result):
    """Only 2xx responses mean the device is online"""
    responses.add(responses.GET, PROBE_URL, status=status)

    assert ConnectivityProbe(PROBE_URL).is_connected() is expected_result

@responses.activate
def test_is_connected_timeout():
    responses.add(responses.GET, PROBE_URL, body=requests.exceptions.Timeout("slow"))

    assert ConnectivityProbe(PROBE_URL).is_connected() is False

@patch("hotspot_login.connectivity.requests.get",
       side_effect=requests.exceptions.ConnectionError("Boom"))
def test_is_connected_connection_error(mock_get):
    """Network failures collapse to False, never raise"""
    assert ConnectivityProbe(PROBE_URL, timeout=7).is_connected() is False
    assert mock_get.call_args.kwargs["timeout"] == 7
