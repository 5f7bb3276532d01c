"""Domain packages: one per business area, each with repository, schemas, service and router"""
