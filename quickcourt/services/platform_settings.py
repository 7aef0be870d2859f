import logging

from sqlalchemy.orm import Session

from quickcourt.models.admin_settings import AdminSettings
from quickcourt.schemas.admin import AdminSettingsUpdate

logger = logging.getLogger(__name__)


def get_admin_settings(db: Session) -> AdminSettings:
    settings_row = db.query(AdminSettings).order_by(AdminSettings.id).first()
    if settings_row is None:
        settings_row = AdminSettings()
        db.add(settings_row)
        db.commit()
        db.refresh(settings_row)
        logger.info("Created default platform settings")
    return settings_row


def update_admin_settings(db: Session, payload: AdminSettingsUpdate) -> AdminSettings:
    settings_row = get_admin_settings(db)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(settings_row, field, value)
    db.commit()
    db.refresh(settings_row)
    logger.info(f"Platform settings updated: {payload.model_dump(exclude_unset=True)}")
    return settings_row
