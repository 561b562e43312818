"""Manipulation des objets deployment kubernetes sous forme de dict JSON."""
import copy
import json
from typing import Dict, Any, List

from app.core.exceptions import MalformedError

APP_LABEL = "app"
OWNER_APP_LABEL = "publisher/app"
OWNER_NAMESPACE_LABEL = "publisher/namespace"


def parse_template(raw: str) -> Dict[str, Any]:
    """Désérialise un template stocké en objet deployment"""
    try:
        workload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedError(f"Failed to parse deployment template: {e}")
    if not isinstance(workload, dict):
        raise MalformedError("Failed to parse deployment template: not an object")

    spec = workload.get("spec")
    pod_spec = (spec or {}).get("template", {}).get("spec") if isinstance(spec, dict) else None
    if not isinstance(pod_spec, dict) or not isinstance(pod_spec.get("containers"), list):
        raise MalformedError("Failed to parse deployment template: no container list")

    workload.setdefault("metadata", {})
    return workload


def containers(workload: Dict[str, Any]) -> List[Dict[str, Any]]:
    return workload["spec"]["template"]["spec"]["containers"]


def set_namespace(workload: Dict[str, Any], namespace: str) -> None:
    workload.setdefault("metadata", {})["namespace"] = namespace


def set_replicas(workload: Dict[str, Any], replicas: int) -> None:
    workload.setdefault("spec", {})["replicas"] = replicas


def prepare_for_deploy(workload: Dict[str, Any], deployment_name: str, app_name: str, namespace_name: str) -> None:
    """Pose les labels de propriété sur le deployment et ses pods.

    Les labels ne dépendent pas du cluster: deux clusters partant du même
    template doivent toujours aboutir à la même spécification.
    """
    metadata = workload.setdefault("metadata", {})
    metadata.setdefault("name", deployment_name)

    owner_labels = {
        OWNER_APP_LABEL: app_name,
        OWNER_NAMESPACE_LABEL: namespace_name,
    }
    pod_metadata = workload["spec"]["template"].setdefault("metadata", {})
    for meta in (metadata, pod_metadata):
        labels = {**(meta.get("labels") or {}), **owner_labels}
        # Le selector est immuable: un label 'app' existant n'est jamais réécrit
        labels.setdefault(APP_LABEL, deployment_name)
        meta["labels"] = labels


def serialize_template(workload: Dict[str, Any]) -> str:
    """Sérialise un objet deployment pour stockage immuable.

    Namespace et replicas sont retirés: le premier est injecté à la
    résolution, le second vit dans l'enregistrement du déploiement.
    """
    stored = copy.deepcopy(workload)
    stored.get("metadata", {}).pop("namespace", None)
    stored.get("metadata", {}).pop("resourceVersion", None)
    stored.get("spec", {}).pop("replicas", None)
    stored.pop("status", None)
    return json.dumps(stored, sort_keys=True)
