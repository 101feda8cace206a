import logging
from abc import ABC

class SimulationElement(ABC):
    """
    ## Abstract Simulation Element 

    Base class for all simulation elements. This includes the world, the messaging substrate, 
    the neighbor tracker, planes and their behaviors.

    ### Attributes:
        - name (`str`): name of the simulation element
        - _logger (`Logger`): debug logger
    """
    def __init__(   self, 
                    element_name : str, 
                    level : int = logging.INFO, 
                    logger : logging.Logger = None) -> None:
        """
        Initiates a new simulation element

        ### Args:
            - element_name (`str`): name used to prefix every log entry of this element
            - level (`int`): logging level for this simulation element. Level set to INFO by default
            - logger (`logging.Logger`) : logger for this simulation element. If none is given, a new one will be generated
        """
        super().__init__()

        if not isinstance(element_name, str):
            raise TypeError(f'`element_name` must be of type `str`. Is of type {type(element_name)}')
        if logger is not None and not isinstance(logger, logging.Logger):
            raise AttributeError(f'`logger` must be of type `logging.Logger`. is of type {type(logger)}')

        self.name = element_name
        self._logger : logging.Logger = self.__set_up_logger(level) if logger is None else logger

    def get_logger(self) -> logging.Logger:
        """
        Returns the logger shared by this element
        """
        return self._logger

    def __set_up_logger(self, level=logging.DEBUG) -> logging.Logger:
        """
        Creates the package-wide logger, attaching a console handler the first time it is requested
        """
        logger = logging.getLogger('maxplanes')
        logger.propagate = False
        logger.setLevel(level)

        if not logger.handlers:
            c_handler = logging.StreamHandler()
            c_handler.setLevel(level)
            c_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
            logger.addHandler(c_handler)

        return logger 

    def log(self, msg : str, level=logging.DEBUG) -> None:
        """
        Logs a message to the desired level, prefixed with this element's name.
        """
        self._logger.log(level, f'{self.name}: {msg}')
