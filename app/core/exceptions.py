"""Exceptions du cycle de réconciliation / publication des templates."""
from typing import Iterable, List


class PublishError(Exception):
    """Erreur de base, porte le code HTTP à renvoyer à l'appelant"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(PublishError):
    """Paramètre absent ou invalide (faute de l'appelant)"""

    status_code = 400


class NotFoundError(PublishError):
    """Entité référencée introuvable"""

    status_code = 404


class PermissionDeniedError(PublishError):
    """Template appartenant à un autre déploiement"""

    status_code = 403


class MalformedError(PublishError):
    """Donnée stockée impossible à parser"""

    status_code = 500


class UnknownContainerError(PublishError):
    """L'override d'image nomme un conteneur absent du template"""

    status_code = 400

    def __init__(self, containers: Iterable[str]):
        self.containers: List[str] = sorted(containers)
        super().__init__(f"Deployment template don't have container: {','.join(self.containers)}")


class UnavailableError(PublishError):
    """Cluster injoignable ou inconnu"""

    status_code = 503


class ApplyFailedError(PublishError):
    """Le cluster a refusé l'objet deployment"""

    status_code = 500


class StatusSyncError(PublishError):
    """Workload appliqué mais le statut de publication n'a pas pu être enregistré"""

    status_code = 500
