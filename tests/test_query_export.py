import pytest

from conftest import make_node

from fleetsim.exporters import NODE_COLUMNS, nodes_to_csv, validation_report_markdown
from fleetsim.query import (
    SortDir,
    SortKey,
    filter_nodes,
    parse_failure_class,
    parse_status,
    sort_nodes,
)
from fleetsim.state import FailureClass, HealthStatus, Snapshot
from fleetsim.stats import fleet_kpis, p95
from fleetsim.verification import run_validation


@pytest.fixture
def nodes():
    return [
        make_node(node_id="n-a", zone="iad1-a", rack="R01", cpu_temp_c=60.0),
        make_node(node_id="n-b", zone="pdx1-b", rack="R07", reboot_count=3),
        make_node(node_id="n-c", zone="iad1-b", rack="R07", cpu_temp_c=60.0),
        make_node(node_id="n-d", zone="sin1-a", rack="R12", nic_errors=6),
        make_node(node_id="n-e", zone="iad1-c", rack="R01", power_w=430.0),
    ]


def ids(rows):
    return [n.node_id for n in rows]


def test_every_sort_key_has_accessor_and_label(nodes):
    for key in SortKey:
        assert key.label
        sort_nodes(nodes, key)


def test_sort_is_stable_on_ties(nodes):
    rows = sort_nodes(nodes, SortKey.CPU_TEMP_C)
    assert ids(rows) == ["n-b", "n-d", "n-e", "n-a", "n-c"]

    rows = sort_nodes(nodes, SortKey.RACK, SortDir.DESC)
    assert ids(rows) == ["n-d", "n-b", "n-c", "n-a", "n-e"]


def test_status_sorts_by_severity(nodes):
    rows = sort_nodes(nodes, SortKey.STATUS, SortDir.DESC)
    assert rows[0].status is HealthStatus.CRITICAL
    assert [n.status for n in rows[-2:]] == [HealthStatus.HEALTHY] * 2


def test_failure_class_sorts_by_declared_order(nodes):
    rows = sort_nodes(nodes, SortKey.FAILURE_CLASS)
    order = list(FailureClass)
    positions = [order.index(n.failure_class) for n in rows]
    assert positions == sorted(positions)


def test_parse_rejects_unknown_values():
    assert SortKey.parse(None) is SortKey.NODE_ID
    assert SortKey.parse("health_score") is SortKey.HEALTH_SCORE
    assert SortDir.parse("DESC") is SortDir.DESC
    with pytest.raises(ValueError):
        SortKey.parse("__class__")
    with pytest.raises(ValueError):
        SortDir.parse("sideways")
    with pytest.raises(ValueError):
        parse_status("BROKEN")
    with pytest.raises(ValueError):
        parse_failure_class("MELTDOWN")
    assert parse_status("all") is None
    assert parse_failure_class("nic_flap") is FailureClass.NIC_FLAP


def test_filters_and_search(nodes):
    assert ids(filter_nodes(nodes, status=HealthStatus.CRITICAL)) == ["n-b"]
    assert ids(filter_nodes(nodes, failure_class=FailureClass.POWER_SPIKE)) == ["n-e"]
    assert ids(filter_nodes(nodes, query="R07")) == ["n-b", "n-c"]
    assert ids(filter_nodes(nodes, query="iad1")) == ["n-a", "n-c", "n-e"]
    assert ids(filter_nodes(nodes, query="boot_loop")) == ["n-b"]
    assert ids(filter_nodes(nodes, status=HealthStatus.DEGRADED, query="sin")) == ["n-d"]
    assert len(filter_nodes(nodes, query="   ")) == len(nodes)


def test_csv_header_and_rows(nodes):
    text = nodes_to_csv(nodes)
    lines = text.split("\n")
    assert lines[0] == ",".join(NODE_COLUMNS)
    assert NODE_COLUMNS[:3] == ["node_id", "rack", "zone"]
    assert NODE_COLUMNS[-3:] == ["status", "failure_class", "health_score"]
    assert len(lines) == len(nodes) + 1
    assert lines[2].startswith("n-b,R07,pdx1-b,50.0,200.0,4000.0,0,0,0,3,0,CRITICAL,BOOT_LOOP,")


def test_csv_quotes_only_when_needed():
    node = make_node(node_id="n-x", zone='pdx "1", b', rack="R02")
    row = nodes_to_csv([node]).split("\n")[1]
    assert row.startswith('n-x,R02,"pdx ""1"", b",')
    assert nodes_to_csv([]) == ""


def test_markdown_report(nodes):
    snap = Snapshot(generated_at=0, nodes=tuple(nodes))
    run = run_validation(snap)
    text = validation_report_markdown(run, snap)
    assert text.startswith("# Fleet Validation Report")
    assert f"`{run.run_id}`" in text
    assert "**PASS**" in text
    assert "| Check | Result | Detail |" in text
    assert text.count("| PASS |") == 6
    assert "- Nodes: 5" in text
    assert "## Fleet" not in validation_report_markdown(run)


def test_p95_nearest_rank():
    assert p95([]) == 0.0
    assert p95([7.0]) == 7.0
    assert p95(list(range(1, 101))) == 95.0
    assert p95([5.0, 1.0, 3.0]) == 5.0


def test_fleet_kpis(nodes):
    kpis = fleet_kpis(Snapshot(generated_at=0, nodes=tuple(nodes)))
    assert kpis.total == 5
    assert (kpis.healthy, kpis.degraded, kpis.critical) == (2, 2, 1)
    assert kpis.avg_temp_c == pytest.approx(54.0)
    assert kpis.p95_power_w == 430.0
    assert fleet_kpis(Snapshot(generated_at=0)).to_dict()["total"] == 0
