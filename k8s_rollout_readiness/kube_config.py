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

import logging
import os
from typing import Optional

from kubernetes import client, config

logger = logging.getLogger(__name__)


def load_api_client(kubeconfig_path: Optional[str] = None) -> client.ApiClient:
    """
    Returns an ApiClient for the current cluster.

    An explicit kubeconfig path (or $KUBECONFIG) wins. Otherwise the in-cluster
    service account is tried first, then the default kubeconfig.
    """
    kubeconfig_path = kubeconfig_path or os.environ.get("KUBECONFIG")
    if kubeconfig_path:
        logger.info(f"Loading Kubernetes config from {kubeconfig_path}")
        return config.new_client_from_config(config_file=kubeconfig_path)

    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config.")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded Kubernetes config from default kubeconfig.")
    return client.ApiClient()
