from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from django.db import models


User = get_user_model()


class SellerGrade(models.Model):
    """Ordinal seller rank. A higher rank unlocks every template of a lower rank."""

    name = models.CharField(max_length=100, unique=True)
    rank = models.PositiveSmallIntegerField(unique=True, validators=[MinValueValidator(1)])
    description = models.TextField(blank=True)

    # Promotion thresholds, compared against the seller's counted orders
    min_sales = models.PositiveIntegerField(default=0, help_text="Counted orders required to reach this grade")
    min_revenue = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, help_text="Revenue required to reach this grade"
    )

    class Meta:
        ordering = ["rank"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.name} (rank {self.rank})"


class Seller(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="seller_profile")
    grade = models.ForeignKey(SellerGrade, on_delete=models.PROTECT, null=True, blank=True, related_name="sellers")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "marketplace"

    def __str__(self):
        return f"Seller {self.user.username}"


class Template(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    required_grade = models.ForeignKey(SellerGrade, on_delete=models.PROTECT, related_name="templates")

    class Meta:
        ordering = ["required_grade__rank", "name"]
        app_label = "marketplace"

    def __str__(self):
        return self.name


class Boutique(models.Model):
    # One boutique per seller
    seller = models.OneToOneField(Seller, on_delete=models.CASCADE, related_name="boutique")
    template = models.ForeignKey(Template, on_delete=models.PROTECT, related_name="boutiques")

    # Display metadata
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    theme_color = models.CharField(max_length=7, default="#007bff")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return self.name
