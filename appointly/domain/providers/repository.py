"""Provider repository - Database operations for providers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Provider


class ProviderRepository:
    """Repository for provider database operations"""

    @staticmethod
    def get_provider_by_username(db: Session, username: str) -> Optional[Provider]:
        """Get provider by username"""
        return db.query(Provider).filter(Provider.username == username).first()

    @staticmethod
    def update_settings(db: Session, provider: Provider, **changes) -> Provider:
        """Write back the full settings document with the given keys replaced"""
        provider.settings = {**(provider.settings or {}), **changes}
        db.commit()
        db.refresh(provider)
        return provider
