"""Inviting students to a quiz and answering invitations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from quizcraft.services.quiz.errors import InvitationError
from quizcraft.services.quiz.models import Invitation, Quiz

logger = logging.getLogger(__name__)

RESPONSES = ("accepted", "rejected")


def invite_students(
    quiz: Quiz,
    quiz_id: str,
    teacher_id: str,
    student_ids: Sequence[str],
    expires_at: Optional[datetime] = None,
) -> Tuple[Quiz, List[Invitation]]:
    """Create pending invitations for students not yet invited.

    Returns the quiz with ``invited_students`` extended and the new
    invitations. A student already on the quiz is skipped, so inviting
    twice is harmless.
    """
    if quiz.owner_id is not None and quiz.owner_id != teacher_id:
        raise InvitationError("You can only invite students to your own quizzes", status_code=403)
    if not student_ids:
        raise InvitationError("Please provide at least one student ID")

    already = set(quiz.invited_students)
    new_ids: List[str] = []
    for sid in student_ids:
        if sid not in already and sid not in new_ids:
            new_ids.append(sid)

    invitations = [
        Invitation(quiz=quiz_id, teacher=teacher_id, student=sid, expires_at=expires_at)
        for sid in new_ids
    ]
    updated = quiz.model_copy(update={"invited_students": [*quiz.invited_students, *new_ids]})
    logger.info(
        "Invited %d students to quiz %s (%d already invited)",
        len(new_ids), quiz_id, len(student_ids) - len(new_ids),
    )
    return updated, invitations


def respond_to_invitation(
    invitation: Invitation,
    student_id: str,
    response: str,
    now: Optional[datetime] = None,
) -> Invitation:
    """Accept or reject a pending invitation addressed to *student_id*."""
    if response not in RESPONSES:
        raise InvitationError("Response must be 'accepted' or 'rejected'")
    if invitation.student != student_id:
        raise InvitationError("You can only respond to your own invitations", status_code=403)
    if invitation.status != "pending":
        raise InvitationError(f"Cannot change response. Invitation is already {invitation.status}")

    now = now or datetime.now(timezone.utc)
    if invitation.expires_at is not None and invitation.expires_at <= now:
        raise InvitationError("Invitation has expired")

    return invitation.model_copy(update={"status": response, "response_at": now})
