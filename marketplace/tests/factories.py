import random
import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils.text import slugify
from faker import Faker

from marketplace.models import (
    Boutique,
    Cart,
    CartItem,
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    Seller,
    SellerGrade,
    Template,
)

User = get_user_model()
fake = Faker()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class AdminFactory(UserFactory):
    is_superuser = True
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class SellerGradeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SellerGrade
        django_get_or_create = ("rank",)

    rank = factory.Sequence(lambda n: n + 1)
    name = factory.LazyAttribute(lambda o: f"Grade {o.rank}")
    description = factory.Faker("sentence", nb_words=8)
    min_sales = 0
    min_revenue = Decimal("0.00")


class SellerFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Seller

    user = factory.SubFactory(UserFactory, username=factory.Sequence(lambda n: f"seller_{n}"))
    grade = factory.SubFactory(SellerGradeFactory, rank=1)


class TemplateFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Template

    name = factory.Sequence(lambda n: f"Template {n}")
    description = factory.Faker("sentence", nb_words=6)
    required_grade = factory.SubFactory(SellerGradeFactory, rank=1)


class BoutiqueFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Boutique

    seller = factory.SubFactory(SellerFactory)
    template = factory.SubFactory(TemplateFactory)
    name = factory.Faker("company")
    description = factory.Faker("paragraph", nb_sentences=2)


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("text", max_nb_chars=200)
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    slug = factory.LazyAttribute(lambda o: slugify(f"{o.name}-{str(o.id)[:8]}"))
    description = factory.Faker("paragraph", nb_sentences=3)
    boutique = factory.SubFactory(BoutiqueFactory)
    category = factory.SubFactory(CategoryFactory)
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    stock_quantity = factory.Faker("random_int", min=0, max=100)
    is_active = True


class CartFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Cart
        django_get_or_create = ("user",)

    user = factory.SubFactory(UserFactory)


class CartItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1


class OrderFactory(factory.django.DjangoModelFactory):
    """
    Persists an order row directly, without touching stock. Use OrderService
    when the test needs the inventory side effects.
    """

    class Meta:
        model = Order

    id = factory.LazyFunction(uuid.uuid4)
    buyer = factory.SubFactory(UserFactory)
    status = OrderStatus.PENDING
    total_amount = Decimal("0.00")


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    seller = factory.LazyAttribute(lambda o: o.product.boutique.seller)
    quantity = 1
    unit_price = factory.LazyAttribute(lambda o: o.product.price)
    total_price = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)
    product_name = factory.LazyAttribute(lambda o: o.product.name)
