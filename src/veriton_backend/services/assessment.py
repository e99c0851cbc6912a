from typing import Any

from veriton_backend.interface.assessment import ExamInterface, QuestionInterface, ResultInterface
from veriton_backend.permissions.principal import Principal
from veriton_backend.services.base import EntityService


class ExamService(EntityService):
    interface = ExamInterface


class QuestionService(EntityService):
    interface = QuestionInterface


class ResultService(EntityService):
    interface = ResultInterface

    def publish(self, principal: Principal, result_id: str, published: bool = True) -> Any:
        """Make a result visible to its student, or hide it again"""
        return self.update(principal, result_id, {"is_published": published})
