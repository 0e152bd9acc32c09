from pathlib import Path
import json
import textwrap

import pytest

from haplan.config.loader import (
    ConfigFileError,
    HostsFileError,
    load_hosts,
    load_topology,
)


def test_load_hosts_json_keeps_order(tmp_path: Path):
    f = tmp_path / "hosts.json"
    f.write_text(json.dumps([
        {"hostname": "node-2", "ip": "192.168.128.103"},
        {"hostname": "node-1", "ip": "192.168.128.102"},
    ]))
    hosts = load_hosts(f)
    assert [h.hostname for h in hosts] == ["node-2", "node-1"]
    assert hosts[0].address == "192.168.128.103"


def test_load_hosts_yaml_accepts_address_key(tmp_path: Path):
    f = tmp_path / "hosts.yaml"
    f.write_text(textwrap.dedent("""
        - hostname: a
          address: 10.0.0.1
        - hostname: b
          ip: 10.0.0.2
    """))
    assert [h.address for h in load_hosts(f)] == ["10.0.0.1", "10.0.0.2"]


def test_load_hosts_empty_list(tmp_path: Path):
    f = tmp_path / "hosts.json"
    f.write_text("[]")
    assert load_hosts(f) == []


def test_load_hosts_missing_file(tmp_path: Path):
    with pytest.raises(HostsFileError, match="not found"):
        load_hosts(tmp_path / "nope.json")


@pytest.mark.parametrize("content,match", [
    ("{not json", "Could not parse"),
    ('{"hostname": "a", "ip": "1"}', "must contain a list"),
    ('["node-1"]', "entry 0 is not an object"),
    ('[{"hostname": "a"}]', "entry 0 is not a valid host"),
])
def test_load_hosts_rejects_bad_input(tmp_path: Path, content, match):
    f = tmp_path / "hosts.json"
    f.write_text(content)
    with pytest.raises(HostsFileError, match=match):
        load_hosts(f)


def test_load_topology_defaults(monkeypatch):
    monkeypatch.delenv("HAPLAN_CONFIG", raising=False)
    cfg = load_topology()
    assert cfg.desired_control_plane_count == 3
    assert cfg.login_user == "root"
    assert cfg.kubeconfig_path == "kubeconfig"
    assert cfg.kubeconfig_context == "default"
    assert cfg.host_limit is None
    assert cfg.run_agents_in_background is False


def test_load_topology_file_with_env_expansion_and_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("SAN_IP", "10.0.0.100")
    f = tmp_path / "topology.yaml"
    f.write_text(textwrap.dedent("""
        desired_control_plane_count: 5
        login_user: ubuntu
        tls_san: ${SAN_IP}
        run_agents_in_background: true
    """))
    cfg = load_topology(f, overrides={"login_user": "pi", "tls_san": None, "host_limit": ""})
    assert cfg.desired_control_plane_count == 5
    assert cfg.login_user == "pi"
    assert cfg.tls_san == "10.0.0.100"
    assert cfg.run_agents_in_background is True
    assert cfg.host_limit is None


def test_load_topology_discovers_file_next_to_hosts(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("HAPLAN_CONFIG", raising=False)
    (tmp_path / "haplan.yaml").write_text("login_user: admin\n")
    cfg = load_topology(hosts_path=tmp_path / "hosts.json")
    assert cfg.login_user == "admin"


def test_load_topology_env_var_wins_over_sibling_file(tmp_path: Path, monkeypatch):
    (tmp_path / "haplan.yaml").write_text("login_user: admin\n")
    other = tmp_path / "other.yaml"
    other.write_text("login_user: ops\n")
    monkeypatch.setenv("HAPLAN_CONFIG", str(other))
    assert load_topology(hosts_path=tmp_path / "hosts.json").login_user == "ops"


def test_load_topology_missing_explicit_file(tmp_path: Path):
    with pytest.raises(ConfigFileError, match="not found"):
        load_topology(tmp_path / "missing.yaml")


def test_load_topology_unknown_key(tmp_path: Path):
    f = tmp_path / "topology.yaml"
    f.write_text("servers: 3\n")
    with pytest.raises(ConfigFileError, match="Invalid topology"):
        load_topology(f)


def test_load_topology_non_mapping(tmp_path: Path):
    f = tmp_path / "topology.yaml"
    f.write_text("- a\n- b\n")
    with pytest.raises(ConfigFileError, match="mapping"):
        load_topology(f)
