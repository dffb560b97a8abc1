"""Template repository - Database operations for email templates"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import EmailTemplate, ScheduledEmail, SentEmail, UserSettings


class TemplateRepository:
    """Repository for template database operations"""

    @staticmethod
    def get_templates(db: Session, user_id: str) -> list[EmailTemplate]:
        """Get all templates owned by a user"""
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.user_id == user_id)
            .order_by(EmailTemplate.created_at.desc())
            .all()
        )

    @staticmethod
    def get_template(db: Session, template_id: str, user_id: str) -> Optional[EmailTemplate]:
        """Get a single template by ID"""
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.id == template_id, EmailTemplate.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_template(db: Session, user_id: str, **template_data) -> EmailTemplate:
        template = EmailTemplate(user_id=user_id, **template_data)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def update_template(db: Session, template: EmailTemplate, **updates) -> EmailTemplate:
        """Update a template with provided fields"""
        for key, value in updates.items():
            if hasattr(template, key):
                setattr(template, key, value)

        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def delete_template(db: Session, template: EmailTemplate) -> None:
        db.delete(template)
        db.commit()

    @staticmethod
    def get_scheduled_emails(db: Session, template_id: str) -> list[ScheduledEmail]:
        """Scheduled sends still pointing at a template"""
        return (
            db.query(ScheduledEmail)
            .filter(ScheduledEmail.template_id == template_id)
            .order_by(ScheduledEmail.send_at)
            .all()
        )

    @staticmethod
    def mark_sent_emails_template_deleted(db: Session, template_id: str) -> int:
        """Flag sent emails of a template that is about to be deleted. Returns rows updated."""
        return (
            db.query(SentEmail)
            .filter(SentEmail.template_id == template_id)
            .update({SentEmail.status: "template_deleted"}, synchronize_session=False)
        )

    @staticmethod
    def get_user_settings(db: Session, user_id: str) -> Optional[UserSettings]:
        return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
