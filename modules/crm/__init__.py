"""
Модуль CRM: воронка лидов, сделки и статусы объектов недвижимости
"""
