from __future__ import annotations


class CommontimeError(Exception):
    """Base for typed failures that cross the engine boundary."""

    code = "COMMON-000"
    message = "Unexpected scheduling error."
    http_status = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        return {"is_success": False, "code": self.code, "message": self.message}


class ReferenceDataMissingError(CommontimeError):
    code = "FIXED-001"
    message = "No fixed schedule slots are configured for this weekday."
    http_status = 404


class TimetableEmptyError(CommontimeError):
    code = "FIXED-002"
    message = "The timetable is public but has no classes."
    http_status = 404


class TimetableParseError(CommontimeError):
    code = "FIXED-003"
    message = "The timetable payload could not be parsed."
    http_status = 500


class TimetableTransportError(CommontimeError):
    code = "FIXED-004"
    message = "The timetable provider could not be reached."
    http_status = 503


class TimetableNotPublicError(CommontimeError):
    code = "FIXED-005"
    message = "The timetable is not shared publicly."
    http_status = 403


class EventNotFoundError(CommontimeError):
    code = "EVENT-001"
    message = "Event not found."
    http_status = 404


class InvalidTimePointError(CommontimeError):
    code = "EVENT-002"
    message = "Time point does not match the event category."
    http_status = 400


class InvalidTimeRangeError(CommontimeError):
    code = "EVENT-003"
    message = "Start and end times must be HH:MM in 30 minute steps with start before end."
    http_status = 400


class SlotsNotFoundError(CommontimeError):
    code = "SCHEDULE-001"
    message = "No slots exist for the requested time point."
    http_status = 404


class ParticipantNotFoundError(CommontimeError):
    code = "MEMBER-001"
    message = "Participant not found."
    http_status = 404


class InvalidParticipantError(CommontimeError):
    code = "MEMBER-002"
    message = "Participant details are invalid."
    http_status = 400
