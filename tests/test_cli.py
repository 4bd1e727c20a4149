# Copyright 2026 The Kubernetes Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
from unittest.mock import MagicMock

import pytest
from kubernetes import config
from kubernetes.client import ApiException

from k8s_rollout_readiness import cli as cli_module

STATEFULSET_YAML = """
apiVersion: apps/v1
kind: StatefulSet
metadata:
  name: web
  namespace: apps
spec:
  replicas: 2
  selector:
    matchLabels:
      app: web
  updateStrategy:
    type: RollingUpdate
status:
  replicas: 2
  readyReplicas: 2
  updatedReplicas: 0
  updateRevision: web-new
"""

PODS_YAML = """
apiVersion: v1
kind: Pod
metadata:
  name: web-0
  labels:
    controller-revision-hash: web-new
---
apiVersion: v1
kind: Pod
metadata:
  name: web-1
  labels:
    controller-revision-hash: {revision}
"""


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_check_reports_ready_after_recount(tmp_path, capsys):
    manifest = _write(tmp_path, "sts.yaml", STATEFULSET_YAML)
    pods = _write(tmp_path, "pods.yaml", PODS_YAML.format(revision="web-new"))

    assert cli_module.main(["check", "-f", manifest, "--pods", pods]) == 0
    assert capsys.readouterr().out.strip().endswith("ready")


def test_check_reports_reason_when_not_ready(tmp_path, capsys):
    manifest = _write(tmp_path, "sts.yaml", STATEFULSET_YAML)
    pods = _write(tmp_path, "pods.yaml", PODS_YAML.format(revision="web-old"))

    assert cli_module.main(["check", "-f", manifest, "--pods", pods]) == 1
    assert "1 out of 2 expected pods have been scheduled" in capsys.readouterr().out


def test_check_without_pods_counts_none_updated(tmp_path):
    manifest = _write(tmp_path, "sts.yaml", STATEFULSET_YAML)

    assert cli_module.main(["check", "-f", manifest]) == 1


def test_check_rejects_non_statefulset(tmp_path, capsys):
    manifest = _write(
        tmp_path, "deploy.json", json.dumps({"kind": "Deployment", "metadata": {}})
    )

    assert cli_module.main(["check", "-f", manifest]) == 2
    assert "Deployment" in capsys.readouterr().out


def test_load_manifests_flattens_lists(tmp_path):
    pod_list = {
        "apiVersion": "v1",
        "kind": "PodList",
        "items": [{"metadata": {"name": "a"}}, {"metadata": {"name": "b"}}],
    }
    path = _write(tmp_path, "pods.json", json.dumps(pod_list))

    names = [m["metadata"]["name"] for m in cli_module.load_manifests(path)]

    assert names == ["a", "b"]


def test_load_manifests_accepts_null_kind(tmp_path):
    path = _write(tmp_path, "pods.yaml", "kind: null\nmetadata:\n  name: web-0\n")

    manifests = cli_module.load_manifests(path)

    assert [m["metadata"]["name"] for m in manifests] == ["web-0"]


@pytest.mark.parametrize(
    "text", ["just a string\n", "- 1\n- 2\n", "kind: PodList\nitems:\n  - web-0\n"]
)
def test_check_rejects_documents_that_are_not_objects(tmp_path, capsys, text):
    manifest = _write(tmp_path, "sts.yaml", text)

    assert cli_module.main(["check", "-f", manifest]) == 2
    assert "not an object" in capsys.readouterr().out


def test_check_rejects_malformed_pods_file(tmp_path, capsys):
    manifest = _write(tmp_path, "sts.yaml", STATEFULSET_YAML)
    pods = _write(tmp_path, "pods.yaml", "metadata: [unterminated\n")

    assert cli_module.main(["check", "-f", manifest, "--pods", pods]) == 2
    assert capsys.readouterr().out.startswith("Error:")


def test_wait_reports_missing_statefulset(monkeypatch: pytest.MonkeyPatch):
    waiter = MagicMock()
    waiter.wait_until_ready.side_effect = ApiException(status=404, reason="Not Found")
    monkeypatch.setattr(
        cli_module.StatefulSetWaiter, "from_config", MagicMock(return_value=waiter)
    )

    assert cli_module.main(["wait", "web", "-n", "apps"]) == 2


def test_wait_reports_missing_kube_config(monkeypatch: pytest.MonkeyPatch):
    def _raise_config_error(**kwargs):
        raise config.ConfigException("Invalid kube-config file. No configuration found.")

    monkeypatch.setattr(
        cli_module.StatefulSetWaiter, "from_config", _raise_config_error
    )

    assert cli_module.main(["wait", "web"]) == 2


def test_wait_exit_codes(monkeypatch: pytest.MonkeyPatch):
    waiter = MagicMock()
    from_config = MagicMock(return_value=waiter)
    monkeypatch.setattr(cli_module.StatefulSetWaiter, "from_config", from_config)

    assert cli_module.main(["wait", "web", "-n", "apps", "--timeout", "5"]) == 0
    waiter.wait_until_ready.assert_called_once_with("web", namespace="apps", timeout=5.0)
    from_config.assert_called_once_with(kubeconfig_path=None, poll_interval=2.0, tracer=None)

    waiter.wait_until_ready.side_effect = TimeoutError("not ready")
    assert cli_module.main(["wait", "web"]) == 1
