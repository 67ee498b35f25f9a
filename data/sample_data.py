"""
Sample data generator for Contract Tracker.
Creates a spread of one-time, monthly and yearly contracts around today's date.
"""

import random
from datetime import date, timedelta
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from contract_tracker.database import DatabaseManager


def generate_sample_data(db: DatabaseManager = None):
    """Generate sample contracts."""
    db = db or DatabaseManager()
    today = date.today()

    def days_ago(days):
        return (today - timedelta(days=days)).isoformat()

    def days_ahead(days):
        return (today + timedelta(days=days)).isoformat()

    contracts = [
        {
            'contract_name': 'Office Lease - Main Street',
            'vendor_name': 'Main Street Properties',
            'contract_type': 'Facilities',
            'contract_subtype': 'Lease',
            'contract_number': 'FAC-001',
            'start_date': days_ago(700),
            'end_date': days_ahead(400),
            'payment_terms': 'monthly',
            'contract_value': 4500,
            'notice_period_days': 90
        },
        {
            'contract_name': 'CRM Subscription',
            'vendor_name': 'CloudWorks Inc',
            'contract_type': 'Software',
            'contract_subtype': 'SaaS',
            'contract_number': 'SW-014',
            'start_date': days_ago(200),
            'renewal_type': 'yearly',
            'payment_terms': 'yearly',
            'contract_value': 18000,
            'notice_period_days': 60
        },
        {
            'contract_name': 'Team Collaboration Suite',
            'vendor_name': 'CloudWorks Inc',
            'contract_type': 'Software',
            'contract_subtype': 'SaaS',
            'contract_number': 'SW-022',
            'start_date': days_ago(95),
            'renewal_type': 'monthly',
            'payment_terms': 'monthly',
            'contract_value': 640,
        },
        {
            'contract_name': 'Network Security Audit',
            'vendor_name': 'Sentinel Security Group',
            'contract_type': 'Consulting',
            'contract_number': 'CON-007',
            'start_date': days_ago(45),
            'end_date': days_ago(15),
            'payment_terms': 'one_time',
            'contract_value': 12500,
        },
        {
            'contract_name': 'Janitorial Services',
            'vendor_name': 'Green Clean Environmental',
            'contract_type': 'Facilities',
            'contract_subtype': 'Cleaning',
            'contract_number': 'FAC-009',
            'start_date': days_ago(320),
            'end_date': days_ahead(20),
            'payment_terms': 'monthly',
            'contract_value': 1850,
        },
        {
            'contract_name': 'Laptop Refresh',
            'vendor_name': 'TechSolutions Inc',
            'contract_type': 'Hardware',
            'contract_number': 'HW-003',
            'start_date': days_ago(130),
            'end_date': days_ago(120),
            'payment_terms': 'one_time',
            'contract_value': 38200,
        },
        {
            'contract_name': 'Legal Retainer',
            'vendor_name': 'Adams & Chen LLP',
            'contract_type': 'Professional Services',
            'contract_number': 'PS-002',
            'start_date': days_ago(500),
            'end_date': days_ago(30),
            'payment_terms': 'monthly',
            'contract_value': 2500,
        },
        {
            'contract_name': 'Fleet Insurance',
            'vendor_name': 'Guardian Mutual',
            'contract_type': 'Insurance',
            'contract_number': 'INS-011',
            'start_date': days_ahead(30),
            'renewal_type': 'yearly',
            'payment_terms': 'yearly',
            'contract_value': 9600,
        },
    ]

    # A few small supply orders spread over the last year
    for i in range(4):
        contracts.append({
            'contract_name': f'Office Supplies Order {i + 1}',
            'vendor_name': 'Scholastic Supplies Co',
            'contract_type': 'Supplies',
            'start_date': days_ago(random.randint(10, 360)),
            'payment_terms': 'one_time',
            'contract_value': round(random.uniform(150, 1200), 2),
        })

    for contract in contracts:
        db.create_contract(contract)
    print(f"Created {len(contracts)} contracts")


if __name__ == '__main__':
    generate_sample_data()
