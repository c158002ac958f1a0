"""
Incident operation tests with a mocked ServiceNow transport.

Telemetry and mirror run for real against in-memory repositories.
"""

import json
from unittest.mock import MagicMock

import pytest

from services.incident_service import IncidentService
from services.mirror_service import IncidentMirror
from services.servicenow_client import UpstreamResponse
from services.telemetry_service import CallTelemetryRecorder
from utils.error_handling import TransportError


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def service(client, incident_store, call_log_store):
    return IncidentService(
        client=client,
        telemetry=CallTelemetryRecorder(call_log_store, "dev", "servicenow-gateway"),
        mirror=IncidentMirror(incident_store, "dev", "servicenow-gateway"),
    )


OPERATIONS = {
    "list": lambda s: s.list_incidents({}),
    "get": lambda s: s.get_incident("a1"),
    "create": lambda s: s.create_incident({"short_description": "disk full"}),
    "update": lambda s: s.update_incident("a1", {"state": "2"}),
}


def test_list_incidents_mirrors_every_result(service, client, incident_store, call_log_store):
    client.send.return_value = UpstreamResponse(
        200,
        {
            "result": [
                {"sys_id": "a1", "number": "INC001", "priority": "1"},
                {"sys_id": "a2", "number": "INC002", "priority": "1"},
            ]
        },
    )

    envelope = service.list_incidents({"priority": "1"})

    client.send.assert_called_once_with(
        "GET", "/api/now/table/incident", query={"priority": "1"}, body=None
    )
    assert envelope.status_code == 200
    assert envelope.success is True
    assert envelope.count == 2
    assert set(incident_store.items) == {"a1", "a2"}
    assert incident_store.items["a1"]["number"] == "INC001"
    assert len(call_log_store.puts) == 1
    assert call_log_store.puts[0]["status_code"] == "200"
    assert call_log_store.puts[0]["error"] is None


def test_list_scenario_envelope_body(service, client, incident_store):
    client.send.return_value = UpstreamResponse(
        200, {"result": [{"sys_id": "a1", "number": "INC001", "priority": "1"}]}
    )

    response = service.list_incidents({"priority": "1"}).to_lambda_response()

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body == {
        "success": True,
        "data": [{"sys_id": "a1", "number": "INC001", "priority": "1"}],
        "count": 1,
    }
    assert list(incident_store.items) == ["a1"]


def test_list_without_result_array_returns_empty(service, client, incident_store):
    client.send.return_value = UpstreamResponse(200, {"unexpected": True})

    envelope = service.list_incidents()

    assert envelope.success is True
    assert envelope.data == []
    assert envelope.count == 0
    assert incident_store.puts == []


def test_get_incident_success_mirrors_record(service, client, incident_store):
    client.send.return_value = UpstreamResponse(
        200, {"result": {"sys_id": "a1", "number": "INC001", "state": "1"}}
    )

    envelope = service.get_incident("a1")

    client.send.assert_called_once_with(
        "GET", "/api/now/table/incident/a1", query=None, body=None
    )
    assert envelope.status_code == 200
    assert envelope.data["sys_id"] == "a1"
    assert incident_store.items["a1"]["incident_id"] == "a1"


def test_get_incident_not_found(service, client, incident_store, call_log_store):
    client.send.return_value = UpstreamResponse(
        404, {"error": {"message": "No Record found"}, "status": "failure"}
    )

    envelope = service.get_incident("zzz")

    assert envelope.status_code == 404
    assert envelope.success is False
    assert envelope.error == "Incident not found"
    assert envelope.details is None
    assert incident_store.puts == []
    assert len(call_log_store.puts) == 1
    assert call_log_store.puts[0]["status_code"] == "404"


def test_get_incident_other_error_is_generic_failure(service, client, call_log_store):
    client.send.return_value = UpstreamResponse(503, "<html>Service Unavailable</html>")

    envelope = service.get_incident("a1")

    assert envelope.status_code == 500
    assert envelope.success is False
    assert envelope.error == "Failed to retrieve incident from ServiceNow"
    assert "503" in envelope.details
    assert "Service Unavailable" in envelope.details
    assert call_log_store.puts[0]["status_code"] == "503"
    assert call_log_store.puts[0]["error"] is not None


def test_list_not_found_is_not_specialised(service, client):
    client.send.return_value = UpstreamResponse(404, {"error": {"message": "nope"}})

    envelope = service.list_incidents()

    assert envelope.status_code == 500
    assert "404" in envelope.details


def test_create_incident_returns_201(service, client, incident_store):
    client.send.return_value = UpstreamResponse(
        201, {"result": {"sys_id": "b2", "number": "INC0010002", "short_description": "disk full"}}
    )

    envelope = service.create_incident({"short_description": "disk full"})

    client.send.assert_called_once_with(
        "POST", "/api/now/table/incident", query=None, body={"short_description": "disk full"}
    )
    assert envelope.status_code == 201
    assert envelope.success is True
    assert envelope.data["sys_id"] == "b2"
    assert incident_store.items["b2"]["short_description"] == "disk full"


def test_create_incident_upstream_200_still_reports_201(service, client):
    client.send.return_value = UpstreamResponse(200, {"result": {"sys_id": "b3"}})

    assert service.create_incident({}).status_code == 201


def test_create_incident_forbidden_is_generic_failure(service, client, incident_store):
    client.send.return_value = UpstreamResponse(403, {"error": {"message": "ACL"}})

    envelope = service.create_incident({"short_description": "x"})

    assert envelope.status_code == 500
    assert envelope.error == "Failed to create incident in ServiceNow"
    assert incident_store.puts == []


def test_update_incident_replaces_mirrored_row(service, client, incident_store):
    client.send.return_value = UpstreamResponse(
        200, {"result": {"sys_id": "a1", "state": "1", "description": "first"}}
    )
    service.get_incident("a1")

    client.send.return_value = UpstreamResponse(200, {"result": {"sys_id": "a1", "state": "2"}})
    envelope = service.update_incident("a1", {"state": "2"})

    assert envelope.status_code == 200
    assert client.send.call_args.args == ("PUT", "/api/now/table/incident/a1")
    assert client.send.call_args.kwargs["body"] == {"state": "2"}
    row = incident_store.items["a1"]
    assert row["state"] == "2"
    assert "description" not in row


def test_update_incident_not_found(service, client, incident_store):
    client.send.return_value = UpstreamResponse(404, {"error": {"message": "No Record found"}})

    envelope = service.update_incident("missing", {"state": "2"})

    assert envelope.status_code == 404
    assert envelope.error == "Incident not found"
    assert incident_store.puts == []


@pytest.mark.parametrize("operation", sorted(OPERATIONS))
def test_transport_failure_is_contained(operation, service, client, incident_store, call_log_store):
    client.send.side_effect = TransportError("Unable to reach ServiceNow: connection refused")

    envelope = OPERATIONS[operation](service)

    assert envelope.status_code == 500
    assert envelope.success is False
    assert "connection refused" in envelope.details
    assert incident_store.puts == []
    assert len(call_log_store.puts) == 1
    assert call_log_store.puts[0]["status_code"] == "500"
    assert call_log_store.puts[0]["error"]


@pytest.mark.parametrize("operation", sorted(OPERATIONS))
def test_one_call_log_per_attempt(operation, service, client, call_log_store):
    client.send.return_value = UpstreamResponse(
        200, {"result": [{"sys_id": "a1"}] if operation == "list" else {"sys_id": "a1"}}
    )

    OPERATIONS[operation](service)
    OPERATIONS[operation](service)

    request_ids = [record["request_id"] for record in call_log_store.puts]
    assert len(request_ids) == 2
    assert len(set(request_ids)) == 2


@pytest.mark.parametrize("operation", sorted(OPERATIONS))
def test_success_mirrors_upstream_sys_id(operation, service, client, incident_store):
    record = {"sys_id": "a1", "number": "INC001"}
    client.send.return_value = UpstreamResponse(
        200, {"result": [record] if operation == "list" else record}
    )

    envelope = OPERATIONS[operation](service)

    assert envelope.success is True
    assert incident_store.items["a1"]["incident_id"] == "a1"


def test_mirror_failure_does_not_fail_operation(client, call_log_store):
    broken_store = MagicMock()
    broken_store.put.side_effect = RuntimeError("ProvisionedThroughputExceeded")
    service = IncidentService(
        client=client,
        telemetry=CallTelemetryRecorder(call_log_store, "dev", "servicenow-gateway"),
        mirror=IncidentMirror(broken_store, "dev", "servicenow-gateway"),
    )
    client.send.return_value = UpstreamResponse(200, {"result": {"sys_id": "a1"}})

    envelope = service.get_incident("a1")

    assert envelope.status_code == 200
    assert envelope.success is True


def test_telemetry_failure_does_not_fail_operation(client, incident_store):
    broken_store = MagicMock()
    broken_store.put.side_effect = RuntimeError("table missing")
    service = IncidentService(
        client=client,
        telemetry=CallTelemetryRecorder(broken_store, "dev", "servicenow-gateway"),
        mirror=IncidentMirror(incident_store, "dev", "servicenow-gateway"),
    )
    client.send.return_value = UpstreamResponse(201, {"result": {"sys_id": "b2"}})

    envelope = service.create_incident({"short_description": "disk full"})

    assert envelope.status_code == 201
    assert "b2" in incident_store.items


def test_success_without_sys_id_skips_mirror(service, client, incident_store):
    client.send.return_value = UpstreamResponse(200, {"result": {"number": "INC001"}})

    envelope = service.get_incident("a1")

    assert envelope.success is True
    assert incident_store.puts == []
