from configwatch.services.http_service import HttpService
from configwatch.exceptions import TransportError
from unittest.mock import Mock
import requests


def test_get_success():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = '{"ok": true}'
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    response = http.get('http://cfg/configs/app/default/application')
    assert response.status_code == 200
    assert response.ok
    assert response.json() == {"ok": True}


def test_get_passes_params_headers_and_timeout_override():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 304
    mock_http_client.return_value.text = ''
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client, timeout=3)
    response = http.get('http://cfg/notifications/v2', params={"appId": "a"}, timeout=65)
    assert response.not_modified
    _, kwargs = mock_http_client.call_args
    assert kwargs["params"] == {"appId": "a"}
    assert kwargs["headers"] == {"User-Agent": "TestAgent"}
    assert kwargs["timeout"] == 65


def test_get_uses_default_timeout():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = ''
    HttpService(user_agent='TestAgent', http_client=mock_http_client, timeout=3).get('http://cfg')
    assert mock_http_client.call_args.kwargs["timeout"] == 3


def test_get_wraps_requests_exception():
    mock_http_client = Mock()
    mock_http_client.side_effect = requests.exceptions.Timeout("timed out")
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)

    try:
        http.get('http://cfg/configs')
        assert False, "expected TransportError"
    except TransportError as e:
        assert "http://cfg/configs" in str(e)
        assert isinstance(e.original, requests.exceptions.Timeout)


def test_get_content_type_from_headers():
    mock_http_client = Mock()
    mock_http_client.return_value.status_code = 200
    mock_http_client.return_value.text = '{}'
    mock_http_client.return_value.headers = {'Content-Type': 'application/json;charset=UTF-8'}
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)
    response = http.get('http://cfg')
    assert response.content_type == 'application/json;charset=UTF-8'


def test_get_bubbles_unexpected_exceptions():
    """Verify that non-requests exceptions from headers.get() are NOT swallowed."""
    mock_http_client = Mock()
    mock_response = Mock()
    mock_response.status_code = 200
    mock_response.text = 'test'
    mock_response.headers.get.side_effect = RuntimeError("Real bug in headers.get()")
    mock_http_client.return_value = mock_response
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)

    try:
        http.get('http://cfg')
        assert False, "expected RuntimeError to bubble up"
    except RuntimeError as e:
        assert "Real bug" in str(e)
