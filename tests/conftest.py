"""
Pytest configuration and shared fixtures for Contract Catalog tests.
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest


ORDERS_OPENAPI = '''\
openapi: 3.0.0
info:
  title: Orders API
  version: 2.1.0
  description: Create and track customer orders
servers:
  - url: https://api.example.com/orders
    description: Production
paths:
  /orders:
    get:
      summary: List orders
      responses:
        '200':
          description: OK
'''

ORDER_EVENTS_ASYNCAPI = '''\
asyncapi: 2.6.0
info:
  title: Order Events
  version: 1.2.0
  description: Events published over the order lifecycle
servers:
  production:
    url: kafka.example.com:9092
    protocol: kafka
    description: Main cluster
channels:
  order.created:
    description: A new order was placed
    publish:
      summary: Order created event
  order.cancelled:
    subscribe:
      description: Order cancellation
'''

ORDERS_ODCS = '''\
apiVersion: v3.0.0
kind: DataContract
id: orders-contract
dataProduct: Orders Data Product
version: 1.0.0
status: active
domain: sales
description:
  purpose: Order facts for analytics
team:
  name: Order Team
  members:
    - username: alice
      role: owner
schema:
  - name: orders
    businessName: Orders
    physicalName: orders_tbl
    physicalType: table
    description: One row per order
    tags: [sales, core]
    properties:
      - name: order_id
        logicalType: string
        physicalType: varchar(36)
        required: true
        primaryKey: true
        unique: true
        classification: internal
        examples: ["ord-1"]
        quality:
          - metric: nullValues
            description: No null order ids
            severity: error
      - name: total
        logicalType: number
roles:
  - role: analyst
    access: read
slaProperties:
  - property: latency
    value: 4
    unit: h
support:
  - channel: slack
    value: "#orders"
'''

CUSTOMER_JSON_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    '$id': 'https://example.com/customer.json',
    'title': 'Customer',
    'description': 'A customer record',
    'type': 'object',
    'required': ['id'],
    'properties': {
        'id': {'type': 'string', 'description': 'Customer id'},
        'tier': {'type': 'string', 'enum': ['gold', 'silver']},
        'email': {'type': 'string', 'format': 'email'},
    },
}


def write_file(root: Path, relative: str, content: str) -> Path:
    """Write a file under root, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary working directory."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def contracts_dir(temp_dir):
    """An empty contracts root."""
    root = temp_dir / 'contracts'
    root.mkdir()
    return root


@pytest.fixture
def sample_contracts(contracts_dir):
    """A nested catalog with one contract of every kind.

    contracts/
        sales/
            orders-service/   orders-api.yaml, order-events.yaml, orders.yaml
            customer-service/ customer.json, notes.txt
        empty-domain/
            idle-service/
    """
    write_file(contracts_dir, 'sales/orders-service/orders-api.yaml', ORDERS_OPENAPI)
    write_file(contracts_dir, 'sales/orders-service/order-events.yaml', ORDER_EVENTS_ASYNCAPI)
    write_file(contracts_dir, 'sales/orders-service/orders.yaml', ORDERS_ODCS)
    write_file(contracts_dir, 'sales/customer-service/customer.json',
               json.dumps(CUSTOMER_JSON_SCHEMA, indent=2))
    write_file(contracts_dir, 'sales/customer-service/notes.txt', 'not a contract')
    (contracts_dir / 'empty-domain' / 'idle-service').mkdir(parents=True)
    return contracts_dir


@pytest.fixture
def output_dir(temp_dir):
    """Output location (not created)."""
    return temp_dir / 'output'
