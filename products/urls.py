from django.urls import path
from . import views

app_name = 'products'

urlpatterns = [
    path('', views.product_feed, name='feed'),
    path('products/new/', views.ProductCreateView.as_view(), name='new'),
    path('products/<int:product_id>/', views.product_detail, name='detail'),
    path('products/<int:product_id>/favorite/', views.toggle_favorite, name='toggle_favorite'),
    path('products/<int:product_id>/status/', views.update_status, name='update_status'),
]
