"""Vendor payloads shared by the test modules."""


TOKEN_BODY = {"access_token": "TEST_TOKEN", "token_type": "Bearer", "expires_in": 1799}


def sample_offer(offer_id="1", grand_total="250.00", duration="PT5H30M"):
    return {
        "type": "flight-offer",
        "id": offer_id,
        "source": "GDS",
        "instantTicketingRequired": False,
        "nonHomogeneous": False,
        "oneWay": False,
        "lastTicketingDate": "2026-11-10",
        "numberOfBookableSeats": 4,
        "itineraries": [{
            "duration": duration,
            "segments": [{
                "departure": {"iataCode": "JFK", "terminal": "4", "at": "2026-11-17T08:00:00"},
                "arrival": {"iataCode": "LAX", "at": "2026-11-17T11:30:00"},
                "carrierCode": "B6",
                "number": "23",
                "aircraft": {"code": "320"},
                "operating": {"carrierCode": "B6"},
                "duration": duration,
                "id": "1",
                "numberOfStops": 0,
                "blacklistedInEU": False,
            }],
        }],
        "price": {
            "currency": "USD",
            "total": grand_total,
            "base": "200.00",
            "fees": [{"amount": "0.00", "type": "SUPPLIER"}],
            "grandTotal": grand_total,
        },
        "pricingOptions": {"fareType": ["PUBLISHED"], "includedCheckedBagsOnly": False},
        "validatingAirlineCodes": ["B6"],
        "travelerPricings": [{
            "travelerId": "1",
            "fareOption": "STANDARD",
            "travelerType": "ADULT",
            "price": {"currency": "USD", "total": grand_total, "base": "200.00"},
            "fareDetailsBySegment": [{
                "segmentId": "1",
                "cabin": "ECONOMY",
                "fareBasis": "LN0AUEL1",
                "brandedFare": "BLUEBASIC",
                "class": "L",
                "includedCheckedBags": {"quantity": 0},
            }],
        }],
    }


def sample_traveler():
    return {
        "id": "1",
        "dateOfBirth": "1985-04-12",
        "name": {"firstName": "JANE", "lastName": "DOE"},
        "gender": "FEMALE",
        "contact": {
            "emailAddress": "jane.doe@example.com",
            "phones": [{"deviceType": "MOBILE", "countryCallingCode": "1", "number": "5551234567"}],
        },
        "documents": [{
            "documentType": "PASSPORT",
            "number": "X1234567",
            "expiryDate": "2030-01-01",
            "issuanceCountry": "US",
            "nationality": "US",
            "holder": True,
        }],
    }
