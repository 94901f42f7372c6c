from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models.deletion import ProtectedError
from django.shortcuts import get_object_or_404
from gearops.core.permissions import IsManagerOrAdmin, get_user_role, has_permission, ADMIN, MANAGER
from gearops.core.utils import error_response, paginate
from .filters import ProductFilter
from .models import Product, AccessoryTemplate
from .serializers import ProductSerializer, ProductListSerializer, AccessoryTemplateSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """Search the catalog or add a product"""
    if request.method == 'GET':
        filterset = ProductFilter(request.query_params, queryset=Product.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return paginate(request, filterset.qs.order_by('brand', 'name'), ProductListSerializer, default_limit=50)

    if not has_permission(get_user_role(request.user), MANAGER):
        return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.prefetch_related('accessories'), pk=pk)
    role = get_user_role(request.user)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        if not has_permission(role, MANAGER):
            return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if role != ADMIN:
            return error_response('Admin access required', status.HTTP_403_FORBIDDEN)
        try:
            product.delete()
        except ProtectedError:
            return error_response('Product is referenced by inspected items; deactivate it instead')
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_accessories(request, pk):
    """Accessory checklist for a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        serializer = AccessoryTemplateSerializer(product.accessories.all(), many=True)
        return Response(serializer.data)

    if not has_permission(get_user_role(request.user), MANAGER):
        return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
    serializer = AccessoryTemplateSerializer(data=request.data)
    if serializer.is_valid():
        if product.accessories.filter(accessory_name__iexact=serializer.validated_data['accessory_name']).exists():
            return error_response('Accessory already exists for this product')
        serializer.save(product=product)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def accessory_detail(request, pk):
    """Update or delete an accessory template"""
    accessory = get_object_or_404(AccessoryTemplate, pk=pk)

    if request.method == 'PATCH':
        serializer = AccessoryTemplateSerializer(accessory, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    accessory.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
