from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.service import Service


class ServiceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, service_id: int, user_id: Optional[str] = None) -> Optional[Service]:
        query = self.db.query(Service).filter(Service.id == service_id)
        if user_id is not None:
            query = query.filter(Service.user_id == user_id)
        return query.first()

    def list_by_user(self, user_id: str, only_active: bool = False) -> List[Service]:
        query = self.db.query(Service).filter(Service.user_id == user_id)
        if only_active:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.name.asc(), Service.id.asc()).all()

    def create(self, service: Service) -> Service:
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)
        return service

    def update(self, service: Service) -> Service:
        self.db.commit()
        self.db.refresh(service)
        return service
