from space_together.domain.entities import AuthUser, JoinSchoolRequest
from space_together.libs.result import Error


def is_invitee(actor: AuthUser, request: JoinSchoolRequest) -> bool:
    """Matched by the linked user when there is one, by email otherwise"""
    if request.invited_user_id:
        return request.invited_user_id == actor.id
    return bool(actor.email) and actor.email.strip().lower() == request.email.lower()


def is_sender(actor: AuthUser, request: JoinSchoolRequest) -> bool:
    return request.sent_by == actor.id


def forbidden(message: str = "You are not allowed to manage join requests") -> Error:
    return Error("FORBIDDEN", message)
