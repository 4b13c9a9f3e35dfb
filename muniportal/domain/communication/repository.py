"""Communication repository - Append-only comment threads on applications"""

from sqlalchemy.orm import Session, joinedload

from ..workflow.registry import ApplicationTypeDescriptor


class CommunicationRepository:
    """Repository for application comment database operations"""

    @staticmethod
    def list_comments(
        db: Session,
        descriptor: ApplicationTypeDescriptor,
        application_id: str,
        include_internal: bool = True,
    ) -> list:
        """Comments for one application, oldest first"""
        model = descriptor.comment_model
        query = (
            db.query(model)
            .options(joinedload(model.reviewer))
            .filter(getattr(model, descriptor.comment_fk_column) == application_id)
        )
        if not include_internal:
            query = query.filter(model.is_internal.is_(False))

        return query.order_by(model.created_at.asc(), model.id.asc()).all()

    @staticmethod
    def build_comment(
        descriptor: ApplicationTypeDescriptor,
        application_id: str,
        author_id: str,
        text: str,
        is_internal: bool = False,
    ):
        """Build (but do not persist) a comment row for the application's thread"""
        return descriptor.comment_model(
            **{descriptor.comment_fk_column: application_id},
            reviewer_id=author_id,
            comment_text=text,
            is_internal=is_internal,
        )

    @staticmethod
    def create_comment(db: Session, comment):
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment
