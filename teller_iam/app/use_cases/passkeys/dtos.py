from teller_iam.app.use_cases.dtos import CamelModel


class PasskeyInfo(CamelModel):
    id: str
    name: str
    credential_id: str
    created_at: str
