"""Pydantic models for the Amadeus Self-Service / Enterprise payloads we touch.

Field names are snake_case in Python and camelCase on the wire. Unknown vendor
fields are kept (``extra="allow"``) so an offer returned by search can be handed
to pricing and then to order creation without losing anything.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class AmadeusModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def to_wire(model: BaseModel) -> Dict[str, Any]:
    """Dump a model the way Amadeus expects it: camelCase, no nulls."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Authentication ---------------------------------------------------------

class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: Optional[str] = None
    expires_in: int = 1799
    state: Optional[str] = None


# --- Flight offers (search) -------------------------------------------------

class Meta(AmadeusModel):
    count: Optional[int] = None
    links: Optional[Dict[str, Any]] = None


class Location(AmadeusModel):
    city_code: Optional[str] = None
    country_code: Optional[str] = None


class Dictionaries(AmadeusModel):
    locations: Optional[Dict[str, Location]] = None
    aircraft: Optional[Dict[str, str]] = None
    currencies: Optional[Dict[str, str]] = None
    carriers: Optional[Dict[str, str]] = None


class FlightEndPoint(AmadeusModel):
    iata_code: Optional[str] = None
    terminal: Optional[str] = None
    at: Optional[str] = None  # kept as the vendor's local ISO string


class Aircraft(AmadeusModel):
    code: Optional[str] = None


class Operating(AmadeusModel):
    carrier_code: Optional[str] = None


class Segment(AmadeusModel):
    departure: Optional[FlightEndPoint] = None
    arrival: Optional[FlightEndPoint] = None
    carrier_code: Optional[str] = None
    number: Optional[str] = None
    aircraft: Optional[Aircraft] = None
    operating: Optional[Operating] = None
    duration: Optional[str] = None
    id: Optional[str] = None
    number_of_stops: Optional[int] = None
    blacklisted_in_eu: Optional[bool] = Field(None, alias="blacklistedInEU")


class Itinerary(AmadeusModel):
    duration: Optional[str] = None
    segments: List[Segment] = Field(default_factory=list)


class Fee(AmadeusModel):
    amount: Optional[str] = None
    type: Optional[str] = None


class Price(AmadeusModel):
    currency: Optional[str] = None
    total: Optional[str] = None
    base: Optional[str] = None
    fees: Optional[List[Fee]] = None
    grand_total: Optional[str] = None


class PricingOptions(AmadeusModel):
    fare_type: Optional[List[str]] = None
    included_checked_bags_only: Optional[bool] = None


class IncludedCheckedBags(AmadeusModel):
    weight: Optional[int] = None
    weight_unit: Optional[str] = None
    quantity: Optional[int] = None


class FareDetailsBySegment(AmadeusModel):
    segment_id: Optional[str] = None
    cabin: Optional[str] = None
    fare_basis: Optional[str] = None
    branded_fare: Optional[str] = None
    fare_class: Optional[str] = Field(None, alias="class")
    included_checked_bags: Optional[IncludedCheckedBags] = None


class TravelerPricing(AmadeusModel):
    traveler_id: Optional[str] = None
    fare_option: Optional[str] = None
    traveler_type: Optional[str] = None
    price: Optional[Price] = None
    fare_details_by_segment: Optional[List[FareDetailsBySegment]] = None


class FlightOffer(AmadeusModel):
    type: Optional[str] = None
    id: Optional[str] = None
    source: Optional[str] = None
    instant_ticketing_required: Optional[bool] = None
    non_homogeneous: Optional[bool] = None
    one_way: Optional[bool] = None
    last_ticketing_date: Optional[str] = None
    number_of_bookable_seats: Optional[int] = None
    itineraries: List[Itinerary] = Field(default_factory=list)
    price: Optional[Price] = None
    pricing_options: Optional[PricingOptions] = None
    validating_airline_codes: Optional[List[str]] = None
    traveler_pricings: Optional[List[TravelerPricing]] = None


class FlightSearchResponse(AmadeusModel):
    meta: Optional[Meta] = None
    data: List[FlightOffer] = Field(default_factory=list)
    dictionaries: Optional[Dictionaries] = None


class VendorWarning(AmadeusModel):
    status: Optional[int] = None
    code: Optional[int] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[Any] = None


# --- Pricing ----------------------------------------------------------------

class FareRuleDetail(AmadeusModel):
    category: Optional[str] = None
    category_code: Optional[str] = None
    free_text: Optional[str] = None
    structured_free_text: Optional[List[str]] = None


class FareRule(AmadeusModel):
    category: Optional[str] = None
    category_code: Optional[str] = None
    tariff_number: Optional[str] = None
    fare_basis: Optional[str] = None
    rules: Optional[List[FareRuleDetail]] = None


class PricedFlightOffer(FlightOffer):
    fare_rules: Optional[List[FareRule]] = None


class TravelerRequirement(AmadeusModel):
    traveler_id: Optional[str] = None
    gender_required: Optional[bool] = None
    document_required: Optional[bool] = None
    document_issuance_city_required: Optional[bool] = None
    date_of_birth_required: Optional[bool] = None
    redress_required_if_any: Optional[bool] = None
    air_france_discount_required: Optional[bool] = None
    spanish_resident_discount_required: Optional[bool] = None


class BookingRequirements(AmadeusModel):
    email_address_required: Optional[bool] = None
    mobile_phone_number_required: Optional[bool] = None
    traveler_requirements: Optional[List[TravelerRequirement]] = None


class FlightOffersPricingData(AmadeusModel):
    type: Optional[str] = None
    flight_offers: List[PricedFlightOffer] = Field(default_factory=list)
    booking_requirements: Optional[BookingRequirements] = None


class FlightOffersPricingResponse(AmadeusModel):
    data: Optional[FlightOffersPricingData] = None
    warnings: Optional[List[VendorWarning]] = None
    # detailed fare rules come back here when include=detailed-fare-rules
    included: Optional[Dict[str, Any]] = None


# --- Upselling --------------------------------------------------------------

class AdditionalService(AmadeusModel):
    type: Optional[str] = None
    amount: Optional[str] = None
    description: Optional[str] = None


class UpselledFlightOffer(FlightOffer):
    branded_fare: Optional[str] = None
    additional_services: Optional[List[AdditionalService]] = None


class FlightOffersUpsellingResponse(AmadeusModel):
    """Upsold offers as a flat list under ``data``.

    The live API answers with ``data: [offer, ...]``; some hosts wrap the same
    offers as ``data: {"flightOffers": [...]}``. Both are accepted.
    """

    meta: Optional[Meta] = None
    data: List[UpselledFlightOffer] = Field(default_factory=list)
    dictionaries: Optional[Dictionaries] = None
    warnings: Optional[List[VendorWarning]] = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap_flight_offers(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("data"), dict):
            value = dict(value)
            value["data"] = value["data"].get("flightOffers") or []
        return value


# --- Orders -----------------------------------------------------------------

class Phone(AmadeusModel):
    device_type: str = "MOBILE"
    country_calling_code: str = ""
    number: str = ""


class TravelerName(AmadeusModel):
    first_name: str
    last_name: str


class TravelerContact(AmadeusModel):
    email_address: Optional[str] = None
    phones: Optional[List[Phone]] = None


class TravelerDocument(AmadeusModel):
    document_type: str = "PASSPORT"
    birth_place: Optional[str] = None
    issuance_location: Optional[str] = None
    issuance_date: Optional[str] = None
    number: str
    expiry_date: str
    issuance_country: str
    validity_country: Optional[str] = None
    nationality: str
    holder: bool = True


class TravelerInfo(AmadeusModel):
    id: str
    date_of_birth: str
    name: TravelerName
    gender: Optional[str] = None
    contact: Optional[TravelerContact] = None
    documents: Optional[List[TravelerDocument]] = None


class GeneralRemark(AmadeusModel):
    sub_type: str = "GENERAL_MISCELLANEOUS"
    text: str


class Remarks(AmadeusModel):
    general: Optional[List[GeneralRemark]] = None


class TicketingAgreement(AmadeusModel):
    option: str = "DELAY_TO_CANCEL"
    delay: Optional[str] = None


class ContactName(AmadeusModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ContactAddress(AmadeusModel):
    lines: Optional[List[str]] = None
    postal_code: Optional[str] = None
    city_name: Optional[str] = None
    country_code: Optional[str] = None


class Contact(AmadeusModel):
    addressee_name: Optional[ContactName] = None
    company_name: Optional[str] = None
    purpose: str = "STANDARD"
    phones: Optional[List[Phone]] = None
    email_address: Optional[str] = None
    address: Optional[ContactAddress] = None


class EmbeddedPayment(AmadeusModel):
    payment_token: Optional[str] = None
    operation: Optional[str] = None


class OtherFormOfPayment(AmadeusModel):
    method: str
    voucher_code: Optional[str] = None
    embedded_payment: Optional[EmbeddedPayment] = None
    flight_offer_ids: Optional[List[str]] = None


class BillingAddress(ContactAddress):
    state_code: Optional[str] = None


class CreditCardPayment(AmadeusModel):
    vendor_code: str
    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    card_holder_name: Optional[str] = None
    cvv_code: Optional[str] = None
    billing_address: Optional[BillingAddress] = None
    company_name: Optional[str] = None


class FormOfPayment(AmadeusModel):
    other: Optional[OtherFormOfPayment] = None
    credit_card: Optional[CreditCardPayment] = None


class FlightOrderData(AmadeusModel):
    type: str = "flight-order"
    flight_offers: List[FlightOffer] = Field(default_factory=list)
    travelers: List[TravelerInfo] = Field(default_factory=list)
    remarks: Optional[Remarks] = None
    ticketing_agreement: Optional[TicketingAgreement] = None
    contacts: Optional[List[Contact]] = None
    queuing_office_id: Optional[str] = None
    form_of_payment: Optional[FormOfPayment] = None


class FlightOrderRequest(AmadeusModel):
    data: Optional[FlightOrderData] = None


class AssociatedRecord(AmadeusModel):
    reference: Optional[str] = None
    creation_date: Optional[str] = None
    origin_system_code: Optional[str] = None
    flight_offer_id: Optional[str] = None


class FlightOrderResponseData(AmadeusModel):
    type: Optional[str] = None
    id: Optional[str] = None
    queuing_office_id: Optional[str] = None
    associated_records: Optional[List[AssociatedRecord]] = None
    flight_offers: List[FlightOffer] = Field(default_factory=list)
    travelers: List[Dict[str, Any]] = Field(default_factory=list)
    ticketing_agreement: Optional[TicketingAgreement] = None
    contacts: Optional[List[Dict[str, Any]]] = None


class FlightOrderResponse(AmadeusModel):
    data: Optional[FlightOrderResponseData] = None
    warnings: Optional[List[VendorWarning]] = None
