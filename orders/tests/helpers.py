from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token

from drones.models import Drone
from orders import services

User = get_user_model()


def create_user(username, is_staff=False):
    user = User.objects.create_user(username, f"{username}@example.com", "pass1234", is_staff=is_staff)
    token = Token.objects.create(user=user)
    return user, token


def create_drone(name="Arrow X1", price="1299.00", stock_quantity=10, in_stock=True):
    return Drone.objects.create(
        name=name,
        model="AX1",
        description="Camera drone with 4K gimbal",
        category=Drone.Category.CAMERA,
        price=price,
        stock_quantity=stock_quantity,
        in_stock=in_stock,
    )


def shipping_address(**overrides):
    data = {
        "street": "1 Main St",
        "city": "Austin",
        "state": "TX",
        "zipCode": "73301",
        "country": "United States",
    }
    data.update(overrides)
    return data


def customer_info(**overrides):
    data = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "555-123-4567",
    }
    data.update(overrides)
    return data


def place_order(user, drone, quantity=1):
    return services.create_order(user, drone.id, quantity, shipping_address(), customer_info())
