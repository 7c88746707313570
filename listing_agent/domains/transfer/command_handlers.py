"""
Transfer Command Handlers
"""
from listing_agent.core.cqrs.command import CommandHandler
from listing_agent.domains.transfer.commands import PutFileCommand
from listing_agent.domains.transfer.models import TransferResult
from listing_agent.domains.transfer.put_service import PutService


class PutFileCommandHandler(CommandHandler[PutFileCommand, TransferResult]):
    def __init__(self, put_service: PutService):
        self._put_service = put_service

    async def handle(self, command: PutFileCommand) -> TransferResult:
        attributes = command.record.attributes() if command.record else {}
        attributes.update(command.attributes)
        return await self._put_service.put(command.content, command.filename, attributes)
