from functools import lru_cache
import logging

from salon_connect.core.config import settings
from salon_connect.application.ports.identity_store import IdentityStorePort
from salon_connect.application.ports.mailer import MailerPort
from salon_connect.application.ports.otp_store import OtpStorePort
from salon_connect.application.ports.transport import RealtimeTransportPort
from salon_connect.application.session_context import SessionContext
from salon_connect.application.use_cases.booking_events import BookingEventRouter
from salon_connect.application.use_cases.chat_session import ChatSessionEngine
from salon_connect.application.use_cases.fetch_recommendations import FetchRecommendationsUseCase
from salon_connect.application.use_cases.list_conversations import ListConversationsUseCase
from salon_connect.application.use_cases.otp import SendOtpUseCase, VerifyOtpUseCase
from salon_connect.application.use_cases.submit_booking import SubmitBookingUseCase
from salon_connect.infrastructure.http.backend_client import BackendClient
from salon_connect.infrastructure.identity.memory_identity_store import MemoryIdentityStore
from salon_connect.infrastructure.mail.mock_mailer import MockMailer
from salon_connect.infrastructure.mail.smtp_mailer import SmtpMailer
from salon_connect.infrastructure.otp.memory_otp_store import MemoryOtpStore
from salon_connect.infrastructure.realtime.socketio_transport import SocketIOTransport


def _is_dev() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_backend_client() -> BackendClient:
    return BackendClient()


def get_transport() -> RealtimeTransportPort:
    return SocketIOTransport()


def get_session_context(transport: RealtimeTransportPort | None = None) -> SessionContext:
    return SessionContext(transport=transport or get_transport())


@lru_cache
def get_identity_store() -> IdentityStorePort:
    if settings.FIREBASE_CREDENTIALS_FILE:
        from salon_connect.infrastructure.firebase.client import get_firestore_client
        from salon_connect.infrastructure.identity.firestore_identity_store import FirestoreIdentityStore

        return FirestoreIdentityStore(db=get_firestore_client())
    logger = logging.getLogger(__name__)
    logger.info("Using MemoryIdentityStore (FIREBASE_CREDENTIALS_FILE not set)")
    return MemoryIdentityStore()


@lru_cache
def get_otp_store() -> OtpStorePort | None:
    logger = logging.getLogger(__name__)
    if settings.FIREBASE_CREDENTIALS_FILE:
        from salon_connect.infrastructure.firebase.client import get_firestore_client
        from salon_connect.infrastructure.otp.firestore_otp_store import FirestoreOtpStore

        try:
            return FirestoreOtpStore(db=get_firestore_client())
        except Exception as e:
            logger.warning("Firebase Admin not initialized", extra={"error": str(e)})
            return None
    if _is_dev():
        logger.info("Using MemoryOtpStore (ENV=dev/local)")
        return MemoryOtpStore()
    return None


@lru_cache
def get_mailer() -> MailerPort:
    logger = logging.getLogger(__name__)
    if not settings.EMAIL_USER or not settings.EMAIL_PASSWORD:
        if _is_dev():
            logger.info("Using MockMailer (credentials missing, ENV=dev/local)")
            return MockMailer()
        raise ValueError("EMAIL_USER and EMAIL_PASSWORD are required to send OTP email.")
    return SmtpMailer()


def get_send_otp_use_case() -> SendOtpUseCase:
    return SendOtpUseCase(
        mailer=get_mailer(),
        store=get_otp_store(),
        app_name=settings.APP_NAME,
        ttl_minutes=settings.OTP_TTL_MINUTES,
    )


def get_verify_otp_use_case() -> VerifyOtpUseCase:
    return VerifyOtpUseCase(store=get_otp_store())


def get_submit_booking_use_case(context: SessionContext) -> SubmitBookingUseCase:
    return SubmitBookingUseCase(
        context=context,
        identity_store=get_identity_store(),
        booking_api=get_backend_client(),
        lead_minutes=settings.BOOKING_LEAD_MINUTES,
        duration_minutes=settings.BOOKING_DEFAULT_DURATION_MINUTES,
    )


def get_booking_event_router(context: SessionContext) -> BookingEventRouter:
    return BookingEventRouter(transport=context.transport)


def get_chat_session(
    context: SessionContext,
    conversation_id: str,
    peer_id: str | None,
    **callbacks,
) -> ChatSessionEngine:
    identity = context.identity
    if identity is None:
        raise ValueError("Sign in before opening a chat.")
    return ChatSessionEngine(
        transport=context.transport,
        chat_api=get_backend_client(),
        conversation_id=conversation_id,
        user_id=identity.user_id,
        peer_id=peer_id,
        typing_idle_seconds=settings.TYPING_IDLE_SECONDS,
        **callbacks,
    )


def get_list_conversations_use_case() -> ListConversationsUseCase:
    return ListConversationsUseCase(chat_api=get_backend_client())


def get_fetch_recommendations_use_case() -> FetchRecommendationsUseCase:
    return FetchRecommendationsUseCase(recommendations=get_backend_client())
