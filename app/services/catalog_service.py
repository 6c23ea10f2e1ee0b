from typing import List

from app.core.errors import NotFound
from app.models.service import Service
from app.repositories.service_repository import ServiceRepository
from app.schemas.profile import ServiceCreate, ServiceUpdate


class CatalogService:
    """Serviços oferecidos por um profissional (nome, duração, preço)."""

    def __init__(self, repo: ServiceRepository):
        self.repo = repo

    def list_services(self, user_id: str, only_active: bool = False) -> List[Service]:
        return self.repo.list_by_user(user_id, only_active=only_active)

    def create_service(self, user_id: str, data: ServiceCreate) -> Service:
        return self.repo.create(Service(user_id=user_id, **data.model_dump()))

    def update_service(self, user_id: str, service_id: int, data: ServiceUpdate) -> Service:
        service = self.repo.get_by_id(service_id, user_id=user_id)
        if not service:
            raise NotFound("Serviço não encontrado")
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(service, field, value)
        return self.repo.update(service)
