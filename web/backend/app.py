"""
CPU Scheduler Simulator - FastAPI backend
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from core.config import (Algorithm, DEFAULT_AGING_THRESHOLD, DEFAULT_TIME_QUANTUM,
                         SimulationStatus, SimulatorConfig)
from core.errors import SchedulerError
from core.process import ProcessState, format_burst_pattern, parse_burst_pattern
from core.simulator import Simulator, run_algorithm
from core.state import EventType
from schedulers import list_algorithms
from utils.input_parser import PRESETS, load_preset
from utils.quiz import QuizState, QuizTrigger
from utils.scoring import Prediction, calculate_prediction_results

logger = logging.getLogger(__name__)

app = FastAPI(
    title="CPU Scheduler Simulator",
    description="Discrete-time CPU scheduling simulator",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models
class ProcessInput(BaseModel):
    name: str
    arrival_time: int
    priority: int = 1
    burst_pattern: str


class SimulationRequest(BaseModel):
    processes: List[ProcessInput]
    algorithms: List[str]
    core_count: int = 1
    time_quantum: int = DEFAULT_TIME_QUANTUM
    aging_enabled: bool = False
    aging_threshold: int = DEFAULT_AGING_THRESHOLD


class PredictionInput(BaseModel):
    process_name: str
    predicted_ct: Optional[int] = None


class PredictionRequest(BaseModel):
    processes: List[ProcessInput]
    algorithm: str
    core_count: int = 1
    time_quantum: int = DEFAULT_TIME_QUANTUM
    predictions: List[PredictionInput] = []
    predicted_awt: Optional[float] = None


class BurstPatternRequest(BaseModel):
    pattern: str


def to_definitions(process_inputs: List[ProcessInput]) -> List[Dict]:
    """ProcessInput -> process definition dictionaries"""
    return [p.model_dump() for p in process_inputs]


def serialize_result(result: Dict) -> Dict:
    """run_algorithm result -> JSON friendly dictionary"""
    return {
        'algorithm': result['algorithm'],
        'config': result['config'].to_dict(),
        'clock': result['clock'],
        'cores': [c.to_dict() for c in result['cores']],
        'processes': [p.to_dict() for p in result['processes']],
        'statistics': result['statistics'],
        'event_log': [e.format() for e in result['event_log']],
    }


def run_request(request: SimulationRequest, algorithm: str) -> Dict:
    return run_algorithm(to_definitions(request.processes), algorithm,
                         core_count=request.core_count,
                         time_quantum=request.time_quantum,
                         aging_enabled=request.aging_enabled,
                         aging_threshold=request.aging_threshold)


@app.get("/")
async def root():
    return {"message": "CPU Scheduler Simulator API", "version": "1.0.0"}


@app.get("/algorithms")
async def get_algorithms():
    """Available algorithms"""
    return {"algorithms": list_algorithms()}


@app.get("/presets")
async def get_presets():
    """Preset scenarios"""
    return {
        "presets": [
            {
                "name": name,
                "description": preset['description'],
                "algorithm": preset['algorithm'].value,
                "core_count": preset.get('core_count', 1),
                "time_quantum": preset.get('time_quantum', DEFAULT_TIME_QUANTUM),
                "processes": preset['processes'],
            }
            for name, preset in PRESETS.items()
        ]
    }


@app.post("/burst-pattern")
async def check_burst_pattern(request: BurstPatternRequest):
    """Parse a burst pattern and report what it contains"""
    bursts = parse_burst_pattern(request.pattern)
    if not bursts:
        raise HTTPException(status_code=400, detail=f"Invalid burst pattern: {request.pattern!r}")
    return {
        "pattern": format_burst_pattern(bursts),
        "bursts": [b.to_dict() for b in bursts],
        "total_cpu": sum(b.duration for b in bursts if b.is_cpu),
        "total_io": sum(b.duration for b in bursts if b.is_io),
    }


@app.post("/simulate")
async def simulate(request: SimulationRequest):
    """Run each requested algorithm over the workload"""
    try:
        results = [serialize_result(run_request(request, algorithm))
                   for algorithm in request.algorithms]
        return {"success": True, "results": results}

    except (SchedulerError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/simulate/compare")
async def compare_algorithms(request: SimulationRequest):
    """Run several algorithms and line up their metrics"""
    try:
        results = []
        comparison = {
            'algorithms': [],
            'avg_waiting_time': [],
            'avg_turnaround_time': [],
            'avg_response_time': [],
            'cpu_utilization': [],
            'throughput': [],
            'context_switches': []
        }

        for algorithm in request.algorithms:
            result = serialize_result(run_request(request, algorithm))
            results.append(result)

            stats = result['statistics']
            comparison['algorithms'].append(result['algorithm'])
            for key in comparison:
                if key != 'algorithms':
                    comparison[key].append(stats.get(key, 0))

        return {
            "success": True,
            "results": results,
            "comparison": comparison
        }

    except (SchedulerError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/predictions/score")
async def score_predictions(request: PredictionRequest):
    """Run the workload and score completion-time / waiting-time guesses"""
    try:
        result = run_algorithm(to_definitions(request.processes), request.algorithm,
                               core_count=request.core_count,
                               time_quantum=request.time_quantum)
    except (SchedulerError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    guesses = {p.process_name: p.predicted_ct for p in request.predictions}
    predictions = [Prediction(p.pid, p.name, guesses.get(p.name))
                   for p in result['processes']]
    scored = calculate_prediction_results(predictions, result['processes'],
                                          request.predicted_awt)
    return {"results": scored.to_dict(), "simulation": serialize_result(result)}


# Realtime simulation over WebSocket
class RealtimeSimulator:
    """Simulator session driven by one WebSocket client"""

    def __init__(self, quiz_enabled: bool = False, quiz_trigger: Optional[QuizTrigger] = None):
        self.simulator = Simulator()
        self.quiz_enabled = quiz_enabled
        self.quiz_trigger = quiz_trigger or QuizTrigger()
        self.quiz = QuizState()
        self.last_log_index = 0
        self.asked_at: Optional[int] = None

    def init(self, message: Dict) -> Dict:
        """Configure and load a workload from an init message"""
        self.simulator.stop()
        self.simulator.reset()
        self.last_log_index = 0
        self.quiz = QuizState()
        self.asked_at = None

        if message.get('preset'):
            load_preset(self.simulator, message['preset'])
        else:
            self.simulator.configure(
                algorithm=message.get('algorithm', Algorithm.FCFS),
                core_count=message.get('core_count', 1),
                time_quantum=message.get('time_quantum', DEFAULT_TIME_QUANTUM),
                aging_enabled=message.get('aging_enabled', False),
                aging_threshold=message.get('aging_threshold', DEFAULT_AGING_THRESHOLD))
            self.simulator.load_processes(message.get('processes', []))

        if message.get('speed') is not None:
            self.simulator.configure(speed=message['speed'])

        config = self.simulator.config
        return {
            'type': 'initialized',
            'config': config.to_dict(),
            'process_count': len(self.simulator.processes),
        }

    @property
    def is_complete(self) -> bool:
        return self.simulator.is_complete

    @property
    def config(self) -> SimulatorConfig:
        return self.simulator.config

    def check_quiz(self):
        """Ask about the situation the next tick is going to resolve"""
        if not self.quiz_enabled or self.quiz.active:
            return None

        state = self.simulator.state
        # one question per clock value
        if self.asked_at == state.clock:
            return None
        new_arrivals = [p for p in state.processes_in(ProcessState.NEW)
                        if p.arrival_time <= state.clock]
        recent_completion = any(e.event_type == EventType.COMPLETE and e.time == state.clock
                                for e in state.kernel_log)
        question = self.quiz_trigger.check_quiz_triggers(
            state.cores, new_arrivals, state.config.algorithm, state.clock,
            state.config.time_quantum, recent_completion)
        if question:
            self.quiz.trigger(question)
            self.asked_at = state.clock
        return question

    def advance(self, timer_driven: bool = False) -> Dict:
        """Execute one tick and return what changed

        An open quiz question holds the tick back until it is answered, so
        the frame carrying the question shows the state it asks about.
        """
        if self.is_complete:
            self.simulator.stop()
            return {'complete': True}

        question = self.quiz.current_question or self.check_quiz()
        if question is None:
            if timer_driven:
                self.simulator.tick()
            else:
                self.simulator.step()

        events = self.simulator.kernel_log
        new_logs = [e.format() for e in events[self.last_log_index:]]
        self.last_log_index = len(events)

        state = self.simulator.state
        return {
            'complete': state.all_terminated(),
            'state': state.to_dict(),
            'new_logs': new_logs,
            'quiz': question.to_dict() if question else None,
        }

    def answer(self, user_answer: str, time_taken: float = 0) -> Dict:
        correct = self.quiz.answer(user_answer, time_taken)
        explanation = self.quiz.current_question.explanation
        self.quiz.dismiss()
        return {'type': 'quiz_result', 'correct': correct, 'explanation': explanation,
                'quiz': self.quiz.to_dict()}


async def run_realtime(websocket: WebSocket, session: RealtimeSimulator):
    """Timer loop: one tick per 1/speed seconds until done, paused or quizzed"""
    delay = 1.0 / session.config.speed

    while session.simulator.status == SimulationStatus.RUNNING:
        result = session.advance(timer_driven=True)
        await websocket.send_json({'type': 'step_result', **result})

        if result['complete']:
            break
        if result.get('quiz'):
            # wait for the answer before going on
            session.simulator.pause()
            break

        await asyncio.sleep(delay)


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """Realtime simulation WebSocket endpoint"""
    await websocket.accept()
    session = RealtimeSimulator()
    run_task: Optional[asyncio.Task] = None

    async def stop_running():
        nonlocal run_task
        if run_task is not None and not run_task.done():
            run_task.cancel()
            try:
                await run_task
            except asyncio.CancelledError:
                pass
        run_task = None
        session.simulator.pause()

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
                action = message.get('action')

                if action == 'init':
                    await stop_running()
                    session.quiz_enabled = message.get('quiz_enabled', False)
                    await websocket.send_json(session.init(message))

                elif action == 'step':
                    await stop_running()
                    await websocket.send_json({'type': 'step_result', **session.advance()})

                elif action == 'run':
                    await stop_running()
                    if message.get('speed') is not None:
                        session.simulator.configure(speed=message['speed'])
                    session.simulator.start()
                    run_task = asyncio.create_task(run_realtime(websocket, session))

                elif action == 'pause':
                    await stop_running()
                    await websocket.send_json({'type': 'paused',
                                               'clock': session.simulator.clock})

                elif action == 'reset':
                    await stop_running()
                    session.simulator.stop()
                    session.simulator.reset()
                    session.last_log_index = 0
                    session.asked_at = None
                    session.quiz.dismiss()
                    await websocket.send_json({'type': 'reset',
                                               'config': session.config.to_dict()})

                elif action == 'answer':
                    await websocket.send_json(session.answer(message.get('answer', ''),
                                                             message.get('time_taken', 0)))

                else:
                    await websocket.send_json({'type': 'error',
                                               'message': f"Unknown action: {action}"})

            except (SchedulerError, ValueError) as e:
                await websocket.send_json({'type': 'error', 'message': str(e)})

    except WebSocketDisconnect:
        logger.info("realtime client disconnected")
    finally:
        await stop_running()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
