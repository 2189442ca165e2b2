"""Chat between users."""
from datetime import datetime, timedelta


def _send(client, headers, receiver_id, content="Is this still available?", **extra):
    return client.post(
        "/api/messages/",
        json={"receiver_id": receiver_id, "content": content, **extra},
        headers=headers,
    )


def test_send_message(client, buyer, seller, item):
    buyer_user, headers = buyer
    seller_user, _ = seller
    response = _send(client, headers, seller_user["id"], item_id=item["id"])
    assert response.status_code == 201
    message = response.json()
    assert message["sender_id"] == buyer_user["id"]
    assert message["receiver_id"] == seller_user["id"]
    assert message["message_type"] == "text"
    assert message["status"] == "sent"
    assert message["is_read"] is False
    assert message["item_id"] == item["id"]


def test_cannot_message_yourself(client, buyer):
    user, headers = buyer
    response = _send(client, headers, user["id"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot send message to yourself"


def test_unknown_receiver(client, buyer):
    _, headers = buyer
    assert _send(client, headers, 9999).status_code == 404


def test_special_message_types(client, buyer, seller, item):
    _, headers = buyer
    seller_user, _ = seller
    receiver = seller_user["id"]

    offer = client.post(
        "/api/messages/price-offer",
        json={"receiver_id": receiver, "item_id": item["id"], "offer_price": 120000},
        headers=headers,
    ).json()
    assert offer["message_type"] == "price_offer"
    assert offer["content"] == "Price offer: $120000.00"

    location = client.post(
        "/api/messages/share-location",
        json={
            "receiver_id": receiver,
            "latitude": -1.9441,
            "longitude": 30.0619,
            "location_name": "Kigali Heights",
        },
        headers=headers,
    ).json()
    assert location["message_type"] == "location"
    assert location["media_url"] == "-1.9441,30.0619"
    assert location["content"] == "Shared location: Kigali Heights"

    meetup = client.post(
        "/api/messages/schedule-meetup",
        json={
            "receiver_id": receiver,
            "item_id": item["id"],
            "meetup_time": "2030-05-01T14:30:00",
            "location": "Nyabugogo",
        },
        headers=headers,
    ).json()
    assert meetup["message_type"] == "meetup"
    assert meetup["content"] == "Meetup scheduled for 2030-05-01T14:30 at Nyabugogo"

    photo = client.post(
        "/api/messages/photo",
        json={"receiver_id": receiver, "photo_url": "https://img.example.com/x.jpg", "caption": "Scratch"},
        headers=headers,
    ).json()
    assert photo["message_type"] == "media"
    assert photo["media_type"] == "image"
    assert photo["content"] == "Scratch"

    media = client.post(
        "/api/messages/media",
        json={"receiver_id": receiver, "media_url": "https://v.example.com/y.mp4", "media_type": "video"},
        headers=headers,
    ).json()
    assert media["media_type"] == "video"

    videos = client.get("/api/messages/media/video", headers=headers).json()
    assert [m["id"] for m in videos] == [media["id"]]


def test_price_response(client, buyer, seller, item):
    buyer_user, _ = buyer
    _, seller_headers = seller

    accepted = client.post(
        "/api/messages/price-response",
        json={"receiver_id": buyer_user["id"], "item_id": item["id"], "accepted": True},
        headers=seller_headers,
    ).json()
    assert accepted["content"] == "Offer accepted!"
    assert accepted["message_type"] == "offer_accepted"

    countered = client.post(
        "/api/messages/price-response",
        json={
            "receiver_id": buyer_user["id"],
            "item_id": item["id"],
            "accepted": False,
            "counter_offer": 135000,
        },
        headers=seller_headers,
    ).json()
    assert countered["content"] == "Counter offer: $135000.00"
    assert countered["message_type"] == "counter_offer"

    neither = client.post(
        "/api/messages/price-response",
        json={"receiver_id": buyer_user["id"], "item_id": item["id"], "accepted": False},
        headers=seller_headers,
    )
    assert neither.status_code == 400


def test_conversation_order_and_latest(client, buyer, seller):
    buyer_user, buyer_headers = buyer
    seller_user, seller_headers = seller
    first = _send(client, buyer_headers, seller_user["id"], "Hi").json()
    second = _send(client, seller_headers, buyer_user["id"], "Hello").json()
    third = _send(client, buyer_headers, seller_user["id"], "Price?").json()

    history = client.get(f"/api/messages/conversation/{seller_user['id']}", headers=buyer_headers)
    assert [m["id"] for m in history.json()] == [first["id"], second["id"], third["id"]]

    latest = client.get(f"/api/messages/latest/{buyer_user['id']}", headers=seller_headers)
    assert latest.json()["id"] == third["id"]

    everything = client.get("/api/messages/conversations", headers=seller_headers)
    assert [m["id"] for m in everything.json()] == [third["id"], second["id"], first["id"]]


def test_latest_without_messages(client, buyer, seller):
    _, headers = buyer
    seller_user, _ = seller
    assert client.get(f"/api/messages/latest/{seller_user['id']}", headers=headers).status_code == 404


def test_read_state(client, buyer, seller):
    _, buyer_headers = buyer
    seller_user, seller_headers = seller
    message = _send(client, buyer_headers, seller_user["id"]).json()

    count = client.get("/api/messages/unread-count", headers=seller_headers).json()
    assert count == {"count": 1}

    # only the receiver changes read state
    assert client.put(f"/api/messages/{message['id']}/read", headers=buyer_headers).status_code == 403

    read = client.put(f"/api/messages/{message['id']}/read", headers=seller_headers).json()
    assert read["is_read"] is True
    assert read["status"] == "read"
    assert read["read_at"] is not None
    assert [m["id"] for m in client.get("/api/messages/read", headers=seller_headers).json()] == [message["id"]]

    unread = client.put(f"/api/messages/{message['id']}/unread", headers=seller_headers).json()
    assert unread["is_read"] is False
    assert unread["status"] == "delivered"
    assert unread["read_at"] is None
    assert [m["id"] for m in client.get("/api/messages/unread", headers=seller_headers).json()] == [message["id"]]


def test_mark_all_read_and_notifications(client, buyer, seller):
    buyer_user, buyer_headers = buyer
    seller_user, seller_headers = seller
    for text in ("one", "two", "three"):
        _send(client, buyer_headers, seller_user["id"], text)

    notes = client.get("/api/messages/notifications", params={"limit": 2}, headers=seller_headers)
    assert [m["content"] for m in notes.json()] == ["three", "two"]

    response = client.put(
        "/api/messages/read-all", params={"sender_id": buyer_user["id"]}, headers=seller_headers
    )
    assert response.json() == {"count": 3}
    assert client.get("/api/messages/unread-count", headers=seller_headers).json() == {"count": 0}


def test_get_message_participants_only(client, buyer, seller, make_user):
    _, buyer_headers = buyer
    seller_user, _ = seller
    _, stranger_headers = make_user("stranger")
    message = _send(client, buyer_headers, seller_user["id"]).json()

    assert client.get(f"/api/messages/{message['id']}", headers=buyer_headers).status_code == 200
    assert client.get(f"/api/messages/{message['id']}", headers=stranger_headers).status_code == 403
    assert client.get("/api/messages/9999", headers=buyer_headers).status_code == 404


def test_report_and_delete(client, buyer, seller):
    _, buyer_headers = buyer
    seller_user, seller_headers = seller
    message = _send(client, buyer_headers, seller_user["id"]).json()

    reported = client.post(
        f"/api/messages/{message['id']}/report", json={"reason": "Spam"}, headers=seller_headers
    )
    assert reported.json()["status"] == "reported"

    assert client.delete(f"/api/messages/{message['id']}", headers=seller_headers).status_code == 403
    assert client.delete(f"/api/messages/{message['id']}", headers=buyer_headers).status_code == 204
    assert client.get(f"/api/messages/{message['id']}", headers=buyer_headers).status_code == 404


def test_delete_conversation(client, buyer, seller):
    buyer_user, buyer_headers = buyer
    seller_user, seller_headers = seller
    _send(client, buyer_headers, seller_user["id"], "a")
    _send(client, seller_headers, buyer_user["id"], "b")

    response = client.delete(f"/api/messages/conversation/{seller_user['id']}", headers=buyer_headers)
    assert response.json() == {"count": 2}
    assert client.get(f"/api/messages/conversation/{seller_user['id']}", headers=buyer_headers).json() == []


def test_item_search_and_date_range(client, buyer, seller, item):
    _, buyer_headers = buyer
    seller_user, _ = seller
    about_item = _send(client, buyer_headers, seller_user["id"], "Does the TABLE wobble?", item_id=item["id"]).json()
    _send(client, buyer_headers, seller_user["id"], "Unrelated")

    by_item = client.get(f"/api/messages/item/{item['id']}", headers=buyer_headers).json()
    assert [m["id"] for m in by_item] == [about_item["id"]]

    found = client.get("/api/messages/search", params={"query": "table"}, headers=buyer_headers).json()
    assert [m["id"] for m in found] == [about_item["id"]]

    now = datetime.utcnow()
    in_range = client.get(
        "/api/messages/date-range",
        params={
            "start": (now - timedelta(hours=1)).isoformat(),
            "end": (now + timedelta(hours=1)).isoformat(),
        },
        headers=buyer_headers,
    ).json()
    assert len(in_range) == 2

    backwards = client.get(
        "/api/messages/date-range",
        params={"start": now.isoformat(), "end": (now - timedelta(days=1)).isoformat()},
        headers=buyer_headers,
    )
    assert backwards.status_code == 400


def test_date_range_accepts_timezone_offsets(client, buyer, seller):
    _, headers = buyer
    seller_user, _ = seller
    message = _send(client, headers, seller_user["id"]).json()
    now = datetime.utcnow()

    # one hour ago expressed in UTC+2, mixed with a naive UTC end
    start = (now + timedelta(hours=1)).replace(microsecond=0).isoformat() + "+02:00"
    end = (now + timedelta(hours=1)).isoformat()
    response = client.get("/api/messages/date-range", params={"start": start, "end": end}, headers=headers)
    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [message["id"]]

    # the same wall-clock start read as UTC lies in the future
    later = (now + timedelta(hours=1)).replace(microsecond=0).isoformat() + "Z"
    response = client.get(
        "/api/messages/date-range",
        params={"start": later, "end": (now + timedelta(hours=2)).isoformat()},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == []

    mixed = client.get(
        "/api/messages/date-range",
        params={"start": "2020-01-01T00:00:00Z", "end": "2010-01-01T00:00:00"},
        headers=headers,
    )
    assert mixed.status_code == 400


def test_start_conversation(client, buyer, seller, item):
    _, headers = buyer
    seller_user, _ = seller
    response = client.post(
        "/api/messages/start-conversation",
        json={"receiver_id": seller_user["id"], "item_id": item["id"], "content": "Hi, I'm interested"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.json()["item_id"] == item["id"]
