"""
History endpoint.

GET /_history - Requests recorded so far, oldest first.
"""
from typing import List

from fastapi import APIRouter, Depends

from mockes.handler import MockHandler
from mockes.server.deps import get_handler
from mockes.server.schemas import HistoryRecordModel


router = APIRouter(tags=["history"])


@router.get("/_history", response_model=List[HistoryRecordModel])
async def history(handler: MockHandler = Depends(get_handler)) -> List[HistoryRecordModel]:
    """
    Return the recorded requests.

    Empty when the server runs with a history capacity of zero.
    """
    return [HistoryRecordModel(**record.to_dict()) for record in handler.request_history()]
