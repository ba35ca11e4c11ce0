"""Contact support: anyone can write in; signed-in users see their threads and replies."""
from fastapi import APIRouter, Depends

from ownbroker.dependencies import get_contact_messages, get_current_user, get_optional_user
from ownbroker.models.user import User
from ownbroker.schemas import ContactMessageCreate, ContactMessageResponse
from ownbroker.services.contact_messages import ContactMessageService

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=ContactMessageResponse, status_code=201)
def submit_message(
    data: ContactMessageCreate,
    current_user: User | None = Depends(get_optional_user),
    messages: ContactMessageService = Depends(get_contact_messages),
):
    return messages.submit(
        data.name,
        data.email,
        data.subject,
        data.message,
        user_id=current_user.uid if current_user else None,
    )


@router.get("/mine", response_model=list[ContactMessageResponse])
def my_messages(
    current_user: User = Depends(get_current_user),
    messages: ContactMessageService = Depends(get_contact_messages),
):
    return messages.list_for_user(current_user.uid)
