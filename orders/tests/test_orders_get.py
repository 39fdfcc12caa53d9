from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from orders import services
from orders.models import Order

from .helpers import create_drone, create_user, customer_info, place_order, shipping_address


class OrderGetTests(APITestCase):
    def setUp(self):
        self.admin, self.admin_token = create_user("admin", is_staff=True)
        self.cust, self.cust_token = create_user("cust")
        self.other, self.other_token = create_user("other")
        self.drone = create_drone(stock_quantity=20)

        self.order = place_order(self.cust, self.drone)
        self.other_order = services.create_order(
            self.other, self.drone.id, 1, shipping_address(), customer_info(email="grace@example.com")
        )
        Order.objects.filter(pk=self.other_order.pk).update(payment_status="completed")

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_list_returns_only_own_orders(self):
        self.auth(self.cust_token)
        res = self.client.get(reverse("order-list"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([o["id"] for o in res.data["results"]], [self.order.id])

    def test_staff_list_all_with_filters(self):
        self.auth(self.admin_token)
        url = reverse("order-list")
        res = self.client.get(url)
        self.assertEqual(res.data["count"], 2)

        res = self.client.get(url, {"payment_status": "completed"})
        self.assertEqual([o["id"] for o in res.data["results"]], [self.other_order.id])

        res = self.client.get(url, {"customer_email": "GRACE@example.com"})
        self.assertEqual([o["id"] for o in res.data["results"]], [self.other_order.id])

        res = self.client.get(url, {"status": "pending", "start_date": "2000-01-01"})
        self.assertEqual(res.data["count"], 2)

        res = self.client.get(url, {"end_date": "2000-01-01"})
        self.assertEqual(res.data["count"], 0)

    def test_staff_filter_by_tracking_number(self):
        Order.objects.filter(pk=self.other_order.pk).update(tracking_number="ARW1A2B3C4D5E6F")
        self.auth(self.admin_token)
        res = self.client.get(reverse("order-list"), {"tracking_number": "arw1a2b3c4d5e6f"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([o["id"] for o in res.data["results"]], [self.other_order.id])
        self.assertEqual(res.data["results"][0]["tracking_number"], "ARW1A2B3C4D5E6F")

    def test_staff_invalid_filter_400(self):
        self.auth(self.admin_token)
        res = self.client.get(reverse("order-list"), {"status": "lost"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        res = self.client.get(reverse("order-list"), {"start_date": "yesterday"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unauthenticated_401(self):
        res = self.client.get(reverse("order-list"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_detail_by_owner_and_staff(self):
        url = reverse("order-detail", args=[self.order.id])
        self.auth(self.cust_token)
        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.order.id)
        self.assertEqual(res.data["drone_name"], self.drone.name)

        self.auth(self.admin_token)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_detail_of_other_user_403(self):
        self.auth(self.other_token)
        res = self.client.get(reverse("order-detail", args=[self.order.id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_not_found_404(self):
        self.auth(self.admin_token)
        res = self.client.get(reverse("order-detail", args=[999999]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_orders(self):
        url = reverse("order-user-list", args=[self.cust.id])
        self.auth(self.cust_token)
        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([o["id"] for o in res.data["results"]], [self.order.id])

        self.auth(self.admin_token)
        self.assertEqual(self.client.get(url).data["count"], 1)

    def test_user_orders_of_someone_else_403(self):
        self.auth(self.other_token)
        res = self.client.get(reverse("order-user-list", args=[self.cust.id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
