import enum
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from foodlink.db.session import Base

class Profile(Base):
    __tablename__ = "profiles"

    # Identity issued by the auth provider (the token subject)
    id = Column(String(64), primary_key=True)
    role = Column(String(20), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or "Anonymous"

class Role(str, enum.Enum):
    farmer = "farmer"
    retailer = "retailer"
    ngo = "ngo"
