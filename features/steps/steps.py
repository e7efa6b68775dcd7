from pytest_bdd import scenarios, given, when, then, parsers
import requests
from tests.conftest import FailingProvider, StaticProvider, run_server

scenarios("../dashboard.feature", "../library_errors.feature")


def _pairs(text):
    out = []
    for part in text.split(","):
        k, v = part.strip().rsplit(":", 1)
        out.append([k, int(v)])
    return out


@given("the dashboard is serving the sample library", target_fixture="api_server")
def sample_server():
    with run_server(provider=StaticProvider()) as ctx:
        yield ctx  # (httpd, base_url)


@given("the dashboard cannot reach the library", target_fixture="api_server")
def failing_server():
    with run_server(provider=FailingProvider()) as ctx:
        yield ctx


@when(parsers.parse('I GET "{path}"'), target_fixture="response")
def do_get(api_server, path):
    _, base = api_server
    return requests.get(f"{base}{path}")


@then(parsers.parse("the response code is {code:d}"))
def assert_status(response, code):
    assert response.status_code == code


@then(parsers.parse('the timeline is "{expected}"'))
def assert_timeline(response, expected):
    assert response.json()["series"] == [[int(y), c] for y, c in _pairs(expected)]


@then(parsers.parse('the top tags are "{expected}"'))
def assert_top_tags(response, expected):
    assert response.json()["tags"] == _pairs(expected)


@then(parsers.parse('the error message is "{message}"'))
def assert_error_message(response, message):
    assert response.json()["message"] == message
