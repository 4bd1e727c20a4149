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

# Label the StatefulSet controller stamps on every pod it creates
CONTROLLER_REVISION_HASH_LABEL = "controller-revision-hash"

STATEFULSET_KIND = "StatefulSet"

ROLLING_UPDATE_STRATEGY = "RollingUpdate"
ON_DELETE_STRATEGY = "OnDelete"

# apps/v1 defaults for unset fields
DEFAULT_REPLICAS = 1
DEFAULT_PARTITION = 0

DEFAULT_NAMESPACE = "default"
DEFAULT_WAIT_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 2.0

TRACE_SERVICE_NAME = "statefulset-readiness"
