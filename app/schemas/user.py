from pydantic import BaseModel

class WhoAmI(BaseModel):
    user: str
