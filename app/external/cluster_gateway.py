import json
import hashlib
import logging
import threading
from typing import Dict, Tuple

import yaml
from kubernetes import client, config

from app.config import settings
from app.core.exceptions import UnavailableError
from app.external.k8s_client import K8sClient
from app.models.cluster import Cluster
from app.repositories.cluster_repository import ClusterRepository

logger = logging.getLogger(__name__)

# Un client par cluster, remplacé quand la config du cluster change
_client_cache: Dict[str, Tuple[str, K8sClient]] = {}
_cache_lock = threading.Lock()


class ClusterGateway:
    """Fournit un K8sClient vivant pour un nom de cluster"""

    def __init__(self, cluster_repository: ClusterRepository):
        self.cluster_repository = cluster_repository

    def resolve(self, cluster_name: str) -> K8sClient:
        cluster = self.cluster_repository.get_by_field("name", cluster_name)
        if cluster is None or not cluster.is_active:
            raise UnavailableError(f"Failed to get k8s client(cluster: {cluster_name}): unknown or inactive cluster")

        fingerprint = hashlib.sha1((cluster.meta_data or "").encode("utf-8")).hexdigest()
        with _cache_lock:
            cached = _client_cache.get(cluster.name)
            if cached is not None and cached[0] == fingerprint:
                return cached[1]

            handle = K8sClient(api_client=self._build_api_client(cluster), cluster=cluster.name)
            _client_cache[cluster.name] = (fingerprint, handle)
            if cached is not None:
                logger.info(f"Configuration du cluster {cluster.name} modifiée, client remplacé")
            else:
                logger.info(f"Client kubernetes initialisé pour le cluster {cluster.name}")
            return handle

    def _build_api_client(self, cluster: Cluster) -> client.ApiClient:
        try:
            meta = json.loads(cluster.meta_data or "{}")
            context = meta.get("context")
            if meta.get("kube_config"):
                return config.new_client_from_config_dict(yaml.safe_load(meta["kube_config"]), context=context)
            if settings.K8S_IN_CLUSTER:
                configuration = client.Configuration()
                config.load_incluster_config(client_configuration=configuration)
                return client.ApiClient(configuration)
            return config.new_client_from_config(config_file=settings.K8S_CONFIG_FILE, context=context or cluster.name)
        except Exception as e:
            logger.error(f"Impossible de configurer le client du cluster {cluster.name}: {e}")
            raise UnavailableError(f"Failed to get k8s client(cluster: {cluster.name}): {e}")


def reset_client_cache():
    """Vide le cache des clients"""
    with _cache_lock:
        _client_cache.clear()
