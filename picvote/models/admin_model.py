from pydantic import BaseModel


class Admin(BaseModel):
    id: str
    name: str
    email: str
    hashed_password: str
