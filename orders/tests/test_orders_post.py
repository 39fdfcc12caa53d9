from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from drones.models import Drone
from orders.models import Order

from .helpers import create_drone, create_user, customer_info, shipping_address


def order_payload(drone, **overrides):
    payload = {
        "drone_id": drone.id,
        "quantity": 2,
        "shipping_address": shipping_address(),
        "customer_info": customer_info(),
    }
    payload.update(overrides)
    return payload


class OrderCreateTests(APITestCase):
    def setUp(self):
        self.url = reverse("order-list")
        self.cust, self.cust_token = create_user("cust")
        self.drone = create_drone(stock_quantity=10, price="1299.00")

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_create_order_201(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, order_payload(self.drone), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["user"], self.cust.id)
        self.assertEqual(res.data["status"], "pending")
        self.assertEqual(res.data["payment_status"], "pending")
        self.assertEqual(float(res.data["total_amount"]), 2598.0)
        self.assertEqual(res.data["customer_full_name"], "Ada Lovelace")
        self.assertEqual(len(res.data["status_history"]), 1)
        self.assertEqual(res.data["status_history"][0]["notes"], "Order created")
        self.drone.refresh_from_db()
        self.assertEqual(self.drone.stock_quantity, 8)

    def test_unauthenticated_401(self):
        res = self.client.post(self.url, order_payload(self.drone), format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_insufficient_stock_400_with_available(self):
        self.auth(self.cust_token)
        Drone.objects.filter(pk=self.drone.pk).update(stock_quantity=1)
        res = self.client.post(self.url, order_payload(self.drone), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "insufficient_stock")
        self.assertEqual(res.data["available"], 1)
        self.assertFalse(Order.objects.exists())

    def test_unavailable_drone_400(self):
        self.auth(self.cust_token)
        Drone.objects.filter(pk=self.drone.pk).update(in_stock=False)
        res = self.client.post(self.url, order_payload(self.drone), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "unavailable")

    def test_unknown_drone_404(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, order_payload(self.drone, drone_id=999999), format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_quantity_out_of_range_400(self):
        self.auth(self.cust_token)
        for qty in (0, 11):
            res = self.client.post(self.url, order_payload(self.drone, quantity=qty), format="json")
            self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("quantity", res.data)

    def test_invalid_zip_and_phone_400(self):
        self.auth(self.cust_token)
        payload = order_payload(
            self.drone,
            shipping_address=shipping_address(zipCode="1234"),
            customer_info=customer_info(phone="12345"),
        )
        res = self.client.post(self.url, payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("zipCode", res.data["shipping_address"])
        self.assertIn("phone", res.data["customer_info"])
        self.drone.refresh_from_db()
        self.assertEqual(self.drone.stock_quantity, 10)

    def test_missing_customer_info_400(self):
        self.auth(self.cust_token)
        payload = order_payload(self.drone)
        del payload["customer_info"]
        res = self.client.post(self.url, payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_email_is_lowercased_and_country_defaults(self):
        self.auth(self.cust_token)
        address = shipping_address()
        del address["country"]
        payload = order_payload(
            self.drone, shipping_address=address, customer_info=customer_info(email="Ada@Example.COM")
        )
        res = self.client.post(self.url, payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["customer_info"]["email"], "ada@example.com")
        self.assertEqual(res.data["shipping_address"]["country"], "United States")
