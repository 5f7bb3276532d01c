"""Billing repository - Profile lookups and subscription state writes"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Profile


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_profile_by_id(db: Session, profile_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def get_profile_by_subscription_id(db: Session, subscription_id: str) -> Optional[Profile]:
        """Get profile by Dodo subscription ID"""
        return db.query(Profile).filter(Profile.dodo_subscription_id == subscription_id).first()

    @staticmethod
    def update_subscription(db: Session, profile: Profile, **fields) -> Profile:
        """Set subscription fields on a profile"""
        for key, value in fields.items():
            setattr(profile, key, value)
        db.commit()
        db.refresh(profile)
        return profile
