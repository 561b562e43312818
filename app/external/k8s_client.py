from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
import copy
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)


class K8sClient:
    """Accès aux objets workload d'un cluster kubernetes"""

    def __init__(self, api_client: Optional[client.ApiClient] = None, cluster: str = "default"):
        if api_client is None:
            try:
                config.load_incluster_config()
            except ConfigException:
                try:
                    config.load_kube_config()
                except Exception as e:
                    logger.error(f"Impossible de charger la configuration Kubernetes: {e}")
                    raise
            api_client = client.ApiClient()

        self.cluster = cluster
        self.api_client = api_client
        self.v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)

    def _to_dict(self, obj) -> Dict[str, Any]:
        return self.api_client.sanitize_for_serialization(obj)

    def get_deployment(self, name: str, namespace: str) -> Dict[str, Any]:
        """Récupère l'objet deployment tel qu'il existe dans le cluster"""
        deployment = self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)
        return self._to_dict(deployment)

    def update_deployment(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Remplace un deployment existant"""
        metadata = body["metadata"]
        updated = self.apps_v1.replace_namespaced_deployment(
            name=metadata["name"],
            namespace=metadata["namespace"],
            body=body
        )
        logger.info(f"Deployment {metadata['name']} mis à jour sur {self.cluster}")
        return self._to_dict(updated)

    def create_or_update_deployment(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Crée le deployment s'il est absent, le remplace sinon"""
        body = copy.deepcopy(body)
        metadata = body["metadata"]
        try:
            self.apps_v1.read_namespaced_deployment(name=metadata["name"], namespace=metadata["namespace"])
        except ApiException as e:
            if e.status != 404:
                raise
            created = self.apps_v1.create_namespaced_deployment(namespace=metadata["namespace"], body=body)
            logger.info(f"Deployment {metadata['name']} créé sur {self.cluster}")
            return self._to_dict(created)

        # resourceVersion vient du template, il ne doit pas conditionner le remplacement
        metadata.pop("resourceVersion", None)
        return self.update_deployment(body)

    def get_deployment_detail(self, name: str, namespace: str) -> Dict[str, Any]:
        """Récupère le deployment et l'état agrégé de ses pods"""
        deployment = self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)
        pods = self.get_pods_by_deployment(namespace, name, deployment=deployment)

        phases = [pod["state"] for pod in pods]
        warnings = []
        for pod in pods:
            for status in pod["container_status"]:
                if status.get("waiting_reason"):
                    warnings.append(f"{pod['name']}/{status['name']}: {status['waiting_reason']}")

        return {
            "name": deployment.metadata.name,
            "namespace": deployment.metadata.namespace,
            "labels": deployment.metadata.labels or {},
            "create_time": deployment.metadata.creation_timestamp,
            "pods_state": {
                "current": deployment.status.replicas or 0,
                "desired": deployment.spec.replicas or 0,
                "running": phases.count("Running"),
                "pending": phases.count("Pending"),
                "failed": phases.count("Failed"),
                "succeeded": phases.count("Succeeded"),
                "warnings": warnings,
            },
        }

    def get_pods_by_deployment(self, namespace: str, name: str, deployment=None) -> List[Dict[str, Any]]:
        """Récupère les pods sélectionnés par un deployment"""
        if deployment is None:
            deployment = self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)

        match_labels = (deployment.spec.selector.match_labels or {}) if deployment.spec.selector else {}
        label_selector = ",".join(f"{k}={v}" for k, v in sorted(match_labels.items()))
        pods = self.v1.list_namespaced_pod(namespace, label_selector=label_selector or None)

        return [
            {
                "name": pod.metadata.name,
                "namespace": pod.metadata.namespace,
                "state": pod.status.phase,
                "pod_ip": pod.status.pod_ip or "",
                "node_name": pod.spec.node_name,
                "start_time": pod.status.start_time,
                "labels": pod.metadata.labels or {},
                "container_status": [
                    {
                        "name": cs.name,
                        "restart_count": cs.restart_count,
                        "waiting_reason": cs.state.waiting.reason if cs.state and cs.state.waiting else None,
                    }
                    for cs in (pod.status.container_statuses or [])
                ],
            }
            for pod in pods.items
        ]
