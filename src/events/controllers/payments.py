from uuid import UUID

from ninja_extra import api_controller, route

from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from common.throttling import PaymentThrottle
from events import schema
from events.models import Registration
from events.service import payment_service


@api_controller("/payments", auth=CookieJWTAuth(), tags=["Payments"])
class PaymentController(UserAwareController):
    @route.post("/process", response=schema.RegistrationSchema, url_name="process_payment", throttle=PaymentThrottle())
    def process(self, payload: schema.PaymentSchema) -> Registration:
        """Pay for a confirmed registration with a (simulated) card."""
        return payment_service.process_payment(payload.registration_id, payload.card_details, self.user())

    @route.get("/status/{uuid:registration_id}", response=schema.PaymentStatusSchema, url_name="payment_status")
    def payment_status(self, registration_id: UUID) -> schema.PaymentStatusSchema:
        return payment_service.payment_status(registration_id, self.user())
