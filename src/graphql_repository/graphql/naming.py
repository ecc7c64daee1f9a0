# src/graphql_repository/graphql/naming.py
from inflection import camelize, pluralize, singularize, underscore

CREATE = "create"
UPDATE = "update"
DELETE = "delete"
UPDATE_OR_CREATE = "updateOrCreate"
DELETE_MANY = "deleteMany"


class OperationNaming:
    """
    Derives root field names from an entity type name.

    The defaults follow Graphcool style schemas: ``companies`` /
    ``company`` for queries, ``createCompany`` for mutations and
    ``_companiesMeta`` for pagination metadata. Subclass to adapt another
    backend's convention.
    """

    def __init__(self, list_prefix: str = ""):
        self.list_prefix = list_prefix

    def singular(self, entity_type: str) -> str:
        return singularize(underscore(entity_type))

    def plural(self, entity_type: str) -> str:
        return pluralize(self.singular(entity_type))

    def list_query(self, entity_type: str) -> str:
        if self.list_prefix:
            return f"{self.list_prefix}{camelize(self.plural(entity_type))}"
        return camelize(self.plural(entity_type), False)

    def single_query(self, entity_type: str) -> str:
        return camelize(self.singular(entity_type), False)

    def mutation(self, action: str, entity_type: str) -> str:
        return f"{action}{camelize(self.singular(entity_type))}"

    def delete_many(self, entity_type: str) -> str:
        return f"{DELETE_MANY}{camelize(self.plural(entity_type))}"

    def meta_query(self, entity_type: str) -> str:
        return f"_{self.list_query(entity_type)}Meta"
