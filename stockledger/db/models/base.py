class RowMixin:
    """Plain-dict view of a model row, safe to hand out after the session closes."""

    def to_dict(self) -> dict:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}
