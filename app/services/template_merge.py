import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import InvalidArgumentError, PublishError, UnknownContainerError
from app.models.deployment_template import DeploymentTemplate
from app.repositories.deployment_repository import DeploymentRepository
from app.repositories.template_repository import DeploymentTemplateRepository
from app.services import workload as wl
from app.services.resolver import DeploymentInfo, OnlineStateResolver

logger = logging.getLogger(__name__)

DESCRIPTION_PREFIX = "[APIKey] "


class BatchErrors:
    """Accumule les erreurs par cluster d'un appel multi-clusters"""

    def __init__(self):
        self.messages: List[str] = []

    def add(self, message: str) -> None:
        logger.error(message)
        self.messages.append(message)

    def __bool__(self) -> bool:
        return bool(self.messages)

    def __len__(self) -> int:
        return len(self.messages)


@dataclass
class TemplateGroup:
    """Clusters partis du même template, qui partagent la nouvelle version"""
    source_template_id: int
    members: List[DeploymentInfo] = field(default_factory=list)
    template: Optional[DeploymentTemplate] = None


def parse_image_overrides(images: str) -> Dict[str, str]:
    """Parse 'conteneur=image,conteneur=image' en dict, les paires invalides sont ignorées"""
    overrides = {}
    for item in (images or "").split(","):
        parts = item.split("=")
        if len(parts) == 2 and parts[1] != "":
            overrides[parts[0]] = parts[1]
    if not overrides:
        raise InvalidArgumentError(f"Invalid images parameter: {images}")
    return overrides


def apply_image_overrides(deployment_object: dict, overrides: Dict[str, str]) -> Set[str]:
    """Remplace les images des conteneurs nommés, retourne les noms non consommés"""
    remaining = dict(overrides)
    for container in wl.containers(deployment_object):
        name = container.get("name")
        if name in overrides:
            container["image"] = overrides[name]
            remaining.pop(name, None)
    return set(remaining)


class TemplateMerger:
    """Applique des overrides d'images sur plusieurs clusters avec un minimum de nouveaux templates"""

    def __init__(
            self,
            resolver: OnlineStateResolver,
            deployment_repository: DeploymentRepository,
            template_repository: DeploymentTemplateRepository
    ):
        self.resolver = resolver
        self.deployment_repository = deployment_repository
        self.template_repository = template_repository

    def collect(
            self,
            deployment: str,
            namespace: str,
            clusters: List[str],
            overrides: Dict[str, str],
            errors: BatchErrors
    ) -> List[TemplateGroup]:
        """Résout chaque cluster, fusionne les images et groupe par template d'origine"""
        groups: Dict[int, TemplateGroup] = {}
        for cluster in clusters:
            try:
                info = self.resolver.resolve(deployment, namespace, cluster, 0)
            except PublishError as e:
                errors.add(f"Failed to get online deployment info on {cluster}: {e.message}")
                continue

            wl.prepare_for_deploy(info.deployment_object, info.deployment.name,
                                  info.deployment.app.name, info.namespace.name)

            unknown = apply_image_overrides(info.deployment_object, overrides)
            if unknown:
                errors.add(f"{UnknownContainerError(unknown).message} (cluster: {cluster})")
                continue

            source_id = info.template.id
            groups.setdefault(source_id, TemplateGroup(source_template_id=source_id)).members.append(info)
        return list(groups.values())

    def persist(self, groups: List[TemplateGroup], user: str, description: str, errors: BatchErrors) -> List[TemplateGroup]:
        """Écrit un template par groupe puis fait pointer chaque membre dessus"""
        persisted = []
        for group in groups:
            first = group.members[0]
            try:
                new_id = self.template_repository.add(
                    deployment_id=first.deployment.id,
                    template=wl.serialize_template(first.deployment_object),
                    description=DESCRIPTION_PREFIX + (description or ""),
                    user=user
                )
            except SQLAlchemyError as e:
                logger.error(f"Echec de l'enregistrement du template (source {group.source_template_id}): {e}")
                errors.add("Failed to save new deployment template!")
                continue

            group.template = self.template_repository.get_by_id(new_id)
            logger.info(
                f"Template {new_id} créé depuis {group.source_template_id} pour "
                f"{', '.join(m.cluster.name for m in group.members)}"
            )

            members = []
            for info in group.members:
                try:
                    self.deployment_repository.set_template(info.deployment, new_id)
                except SQLAlchemyError as e:
                    logger.error(f"Echec de la mise à jour du déploiement {info.deployment.id}: {e}")
                    errors.add(f"Failed to update deployment by id on {info.cluster.name}!")
                    continue
                info.template = group.template
                members.append(info)
            group.members = members
            persisted.append(group)
        return persisted

    def merge(
            self,
            deployment: str,
            namespace: str,
            clusters: List[str],
            overrides: Dict[str, str],
            user: str,
            description: str,
            errors: BatchErrors
    ) -> List[TemplateGroup]:
        groups = self.collect(deployment, namespace, clusters, overrides, errors)
        # Une erreur avant le regroupement annule toute écriture
        if errors:
            return []
        return self.persist(groups, user, description, errors)
