from django.contrib import admin

from .models import (
    Boutique, Cart, CartItem, Category, Order, OrderItem, Product,
    SalesStatistic, Seller, SellerGrade, Template
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_active', 'product_count', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = ('name', 'description')
    prepopulated_fields = {'slug': ('name',)}

    def product_count(self, obj):
        return obj.products.filter(is_active=True).count()
    product_count.short_description = "Active Products"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'boutique', 'category', 'price', 'stock_quantity', 'is_active', 'created_at')
    list_filter = ('is_active', 'category', 'created_at')
    search_fields = ('name', 'description', 'boutique__name')
    readonly_fields = ('id', 'slug', 'created_at', 'updated_at')

    def get_readonly_fields(self, request, obj=None):
        # Once listed, stock only moves through the inventory ledger
        if obj is not None:
            return self.readonly_fields + ('stock_quantity',)
        return self.readonly_fields

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('boutique', 'category')


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ('product', 'seller', 'product_name', 'quantity', 'unit_price', 'total_price', 'position')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'buyer', 'status', 'total_amount', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('id', 'buyer__username', 'buyer__email')
    readonly_fields = (
        'id', 'buyer', 'status', 'total_amount', 'created_at', 'updated_at', 'validated_at',
        'shipped_at', 'delivered_at', 'cancelled_at', 'cancellation_reason', 'cancelled_by'
    )
    inlines = [OrderItemInline]

    # Orders are never deleted; status changes go through OrderService
    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('user', 'created_at', 'updated_at')
    search_fields = ('user__username',)
    inlines = [CartItemInline]


@admin.register(SellerGrade)
class SellerGradeAdmin(admin.ModelAdmin):
    list_display = ('name', 'rank', 'min_sales', 'min_revenue')
    ordering = ('rank',)


@admin.register(Seller)
class SellerAdmin(admin.ModelAdmin):
    list_display = ('user', 'grade', 'created_at')
    list_filter = ('grade',)
    search_fields = ('user__username',)


@admin.register(Template)
class TemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'required_grade')
    list_filter = ('required_grade',)


@admin.register(Boutique)
class BoutiqueAdmin(admin.ModelAdmin):
    list_display = ('name', 'seller', 'template', 'is_active', 'created_at')
    list_filter = ('is_active', 'template')
    search_fields = ('name', 'seller__user__username')
    # Template links are grade-checked by BoutiqueService
    readonly_fields = ('template',)


@admin.register(SalesStatistic)
class SalesStatisticAdmin(admin.ModelAdmin):
    list_display = ('seller', 'date', 'units_sold', 'order_count', 'revenue', 'refreshed_at')
    list_filter = ('date',)
    readonly_fields = ('seller', 'date', 'units_sold', 'order_count', 'revenue', 'refreshed_at')
