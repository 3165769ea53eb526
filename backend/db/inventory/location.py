from sqlalchemy import Column, Integer, String

from ..database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True, index=True)
    capacity = Column(Integer, nullable=False, default=0)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "capacity": self.capacity,
        }
