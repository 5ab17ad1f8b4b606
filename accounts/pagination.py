from rest_framework.pagination import PageNumberPagination

from .utils import success_response


class StandardPagination(PageNumberPagination):
    """page/limit pagination wrapped in the success envelope."""
    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data, message='Results retrieved successfully'):
        return success_response(message, data={
            'results': data,
            'pagination': {
                'current': self.page.number,
                'pages': self.page.paginator.num_pages,
                'total': self.page.paginator.count,
            },
        })


def apply_sort(queryset, request, allowed, default):
    """Order by the `sort` query param when it names an allowed field."""
    sort = request.query_params.get('sort') or default
    if sort.lstrip('-') not in allowed:
        sort = default
    return queryset.order_by(sort, '-id')
